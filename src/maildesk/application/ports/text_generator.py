from __future__ import annotations

from typing import Callable

# html body in, plain-text body out; raises ValueError on unusable markup
TextGenerator = Callable[[str], str]
