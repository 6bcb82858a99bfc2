"""
Keep-alive probe detection and replies.

Wire format (plain text, one message per line):
    PING <origin>\\n    peer -> client, the probe
    PONG <origin>\\n    client -> peer, our answer

The probe is recognised by the literal token ``PING`` anywhere in a line;
the first whitespace-delimited word after it is the origin echoed back.
"""

from dataclasses import dataclass, field

from telnetirc.utils.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# Protocol Tokens
# =============================================================================

PROBE_TOKEN: bytes = b"PING"
REPLY_TOKEN: bytes = b"PONG"
LINE_END: bytes = b"\n"

# RFC 1459 message limit, bounds how much a split probe may hold back
MAX_LINE_LENGTH = 512


def build_reply(origin: bytes) -> bytes:
    """Compose the ``PONG <origin>\\n`` answer for a probe."""
    return REPLY_TOKEN + b" " + origin + LINE_END


def parse_origin(line: bytes) -> bytes | None:
    """
    Extract the origin token following ``PING`` in a line.

    Returns:
        The origin, or None if the line has no PING or nothing after it.
    """
    idx = line.find(PROBE_TOKEN)
    if idx < 0:
        return None
    words = line[idx + len(PROBE_TOKEN) :].split()
    return words[0] if words else None


def _partial_token_start(data: bytes) -> int:
    """Index where ``data`` ends in a proper prefix of PING, else -1."""
    for size in range(len(PROBE_TOKEN) - 1, 0, -1):
        if data.endswith(PROBE_TOKEN[:size]):
            return len(data) - size
    return -1


# =============================================================================
# Responder
# =============================================================================


@dataclass
class ScanResult:
    """Outcome of scanning one peer chunk."""

    passthrough: bytes = b""  # Bytes for local output
    replies: list[bytes] = field(default_factory=list)  # Writes for the transport


class ProbeResponder:
    """
    Splits peer chunks into output bytes and PONG replies.

    Without reassembly every chunk is judged on its own, so a probe cut by a
    read boundary is missed (the reference behaviour). With reassembly an
    unterminated probe line, or a trailing partial ``PING`` token, is held
    back and completed by the next chunk.
    """

    def __init__(self, reassemble: bool = False):
        self.reassemble = reassemble
        self._pending = b""

    @property
    def pending(self) -> bytes:
        return self._pending

    def scan(self, chunk: bytes) -> ScanResult:
        """
        Process one chunk read from the peer.

        Lines containing PING are removed from the output and answered;
        everything else is passed through in order.
        """
        data = self._pending + chunk
        self._pending = b""
        result = ScanResult()
        out = bytearray()
        pos = 0

        while True:
            idx = data.find(PROBE_TOKEN, pos)
            if idx < 0:
                tail = data[pos:]
                hold = _partial_token_start(tail) if self.reassemble else -1
                if hold >= 0:
                    out += tail[:hold]
                    self._pending = tail[hold:]
                else:
                    out += tail
                break

            nl = data.rfind(LINE_END, pos, idx)
            line_start = nl + 1 if nl >= 0 else pos
            line_end = data.find(LINE_END, idx)
            out += data[pos:line_start]

            if line_end < 0:
                line = data[line_start:]
                if self.reassemble and len(line) < MAX_LINE_LENGTH:
                    self._pending = line
                    logger.debug("Holding back unterminated PING line.")
                    break
                self._answer(line, result)
                break

            self._answer(data[line_start : line_end + 1], result)
            pos = line_end + 1

        result.passthrough = bytes(out)
        return result

    def flush(self) -> bytes:
        """Return and forget any held-back bytes."""
        pending, self._pending = self._pending, b""
        return pending

    def _answer(self, line: bytes, result: ScanResult) -> None:
        origin = parse_origin(line)
        if origin is None:
            logger.debug(f"Missed PING without origin: {line!r}")
            return
        reply = build_reply(origin)
        result.replies.append(reply)
        logger.debug(f"PING {line.strip()!r} -> {reply.strip()!r}")
