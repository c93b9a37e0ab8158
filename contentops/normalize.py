"""
Body normalization helpers.

The versioning policy compares bodies exactly. Callers that want edits
consisting only of trailing whitespace or line-ending changes to be
treated as no-ops normalize the body before saving.
"""


def normalize_newlines(s: str) -> str:
    return s.replace("\r\n", "\n").replace("\r", "\n")


def normalize_body(body: str) -> str:
    lines = [line.rstrip() for line in normalize_newlines(body).split("\n")]
    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines)


def normalize_title(title: str) -> str:
    return " ".join(title.strip().split())
