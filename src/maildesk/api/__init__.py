"""HTTP surface for the email lifecycle."""
