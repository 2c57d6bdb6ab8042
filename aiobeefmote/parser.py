"""Split a line of client input into a command and its argument."""

from __future__ import annotations

from .models import ParsedCommand

LINE_TERMINATORS = ("\r", "\n")


def parse_line(raw_line: str) -> ParsedCommand:
    """
    Parse a raw line as sent by a client.

    The command is everything before the first whitespace character. Whatever
    follows that character up to the first CR/LF is the argument, kept
    verbatim (including leading and interior whitespace) because handlers
    such as search treat it as free text. A remainder holding nothing but
    whitespace means there is no argument.
    """
    for pos, char in enumerate(raw_line):
        if char.isspace():
            command = raw_line[:pos]
            rest = raw_line[pos + 1 :]
            break
    else:
        return ParsedCommand(raw_line)

    for terminator in LINE_TERMINATORS:
        rest = rest.split(terminator, 1)[0]
    if not rest.strip():
        return ParsedCommand(command)
    return ParsedCommand(command, rest)
