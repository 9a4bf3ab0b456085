"""One-shot draft save (and optional send) from a JSON file."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict

from maildesk.domain import CreateInput, EmailContent, MaildeskError, SaveInput
from maildesk.infrastructure import get_settings
from maildesk.infrastructure.container import get_use_cases
from maildesk.infrastructure.log_config import configure_logging


def load_input(path: str, message_id: str | None, send: bool, generate_text: str | None) -> SaveInput:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    content = EmailContent(
        subject=data.get("subject", ""),
        from_=data.get("from", []),
        to=data.get("to", []),
        cc=data.get("cc", []),
        bcc=data.get("bcc", []),
        reply_to=data.get("replyTo", []),
        text=data.get("text", ""),
        html=data.get("html", ""),
    )
    return SaveInput(
        message_id=message_id or data.get("messageID", ""),
        content=content,
        generate_text=generate_text if generate_text is not None else data.get("generateText", "off"),
        send=send or bool(data.get("send", False)),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Save a draft email, optionally sending it")
    parser.add_argument("path", help="JSON file with the draft fields")
    parser.add_argument("--id", dest="message_id", default=None, help="Draft id (default: messageID in the file)")
    parser.add_argument("--send", action="store_true", help="Send the draft after saving it")
    parser.add_argument("--generate-text", choices=["off", "on", "auto"], default=None, help="Text body policy")
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    data = load_input(args.path, args.message_id, args.send, args.generate_text)

    use_cases = get_use_cases()
    try:
        if data.message_id:
            result = use_cases.save.save(data)
        else:
            # no id given: create a new draft
            result = use_cases.save.create(
                CreateInput(content=data.content, generate_text=data.generate_text, send=data.send)
            )
    except MaildeskError as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1

    out = asdict(result)
    out["kind"] = result.kind.value
    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
