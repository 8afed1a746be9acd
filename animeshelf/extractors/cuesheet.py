"""Cue sheet parsing."""

import logging
import re
from pathlib import Path

import chardet

from ..exceptions import CueParseError
from ..models.media import CueFile, CueIndex, CueSheet, CueTrack

logger = logging.getLogger(__name__)

_COMMAND_RE = re.compile(r"^\s*([A-Za-z]+)\s*(.*?)\s*$")
_TIME_RE = re.compile(r"^(\d+):(\d{1,2}):(\d{1,2})$")


def decode_cue_bytes(raw: bytes) -> str:
    """Decode cue sheet bytes.

    UTF-8 (with or without BOM) is tried first; anything else is handed to
    chardet, since ripped sheets are often Shift-JIS or GBK.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(raw)
    encoding = detected.get("encoding")
    if not encoding:
        raise CueParseError("could not detect cue sheet encoding")
    logger.debug(f"Decoding cue sheet as {encoding} (confidence {detected.get('confidence')})")
    try:
        return raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise CueParseError(f"could not decode cue sheet as {encoding}: {e}") from e


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def _parse_file_argument(argument: str) -> str:
    """Extract the file name from a FILE argument (`"name.flac" WAVE`)."""
    argument = argument.strip()
    if argument.startswith('"'):
        end = argument.find('"', 1)
        if end == -1:
            raise CueParseError(f"unterminated quote in FILE line: {argument}")
        return argument[1:end]
    # Unquoted: the last word is the file type
    parts = argument.rsplit(None, 1)
    return parts[0] if len(parts) == 2 else argument


def _parse_index(argument: str, line_no: int) -> CueIndex:
    parts = argument.split()
    if len(parts) != 2 or not parts[0].isdigit():
        raise CueParseError(f"line {line_no}: malformed INDEX: {argument}")
    match = _TIME_RE.match(parts[1])
    if not match:
        raise CueParseError(f"line {line_no}: malformed INDEX time: {parts[1]}")
    minutes, seconds, frames = (int(g) for g in match.groups())
    return CueIndex(number=int(parts[0]), minutes=minutes, seconds=seconds, frames=frames)


def parse_cue_text(text: str) -> CueSheet:
    """Parse cue sheet text into a CueSheet.

    Unknown commands (REM, FLAGS, ISRC, PREGAP, ...) are ignored. A track
    without its own PERFORMER inherits the sheet performer.
    """
    sheet = CueSheet()
    current_file: CueFile | None = None
    current_track: CueTrack | None = None

    for line_no, line in enumerate(text.splitlines(), start=1):
        match = _COMMAND_RE.match(line)
        if not match:
            continue
        command, argument = match.group(1).upper(), match.group(2)

        if command == "FILE":
            current_file = CueFile(name=_parse_file_argument(argument))
            sheet.files.append(current_file)
            current_track = None
        elif command == "TRACK":
            if current_file is None:
                raise CueParseError(f"line {line_no}: TRACK before any FILE")
            number = argument.split()[0] if argument.split() else ""
            if not number.isdigit():
                raise CueParseError(f"line {line_no}: malformed TRACK: {argument}")
            current_track = CueTrack(number=int(number))
            current_file.tracks.append(current_track)
        elif command == "INDEX":
            if current_track is None:
                raise CueParseError(f"line {line_no}: INDEX outside of a TRACK")
            current_track.indexes.append(_parse_index(argument, line_no))
        elif command == "TITLE":
            if current_track is not None:
                current_track.title = _unquote(argument)
            else:
                sheet.title = _unquote(argument)
        elif command == "PERFORMER":
            if current_track is not None:
                current_track.performer = _unquote(argument)
            else:
                sheet.performer = _unquote(argument)

    for cue_file in sheet.files:
        for track in cue_file.tracks:
            if track.performer is None:
                track.performer = sheet.performer

    return sheet


class CueParser:
    """Reads and parses cue sheet files."""

    def parse(self, cue_path: str) -> CueSheet:
        """Parse a cue sheet file.

        Raises CueParseError if the file cannot be read, decoded or parsed.
        """
        try:
            raw = Path(cue_path).read_bytes()
        except OSError as e:
            raise CueParseError(f"could not read {cue_path}: {e}") from e
        return parse_cue_text(decode_cue_bytes(raw))
