"""
telnet-irc: a raw IRC terminal client that never times out.

Relays bytes between the local terminal and an IRC server, answering the
server's keep-alive PING probes on the user's behalf.
"""

__version__ = "0.2.0"
