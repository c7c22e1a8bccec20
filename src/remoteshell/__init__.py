"""remoteshell -- Minimal remote command-execution session.

A server accepts one TCP connection at a time, runs each newline-terminated
command line through the shell and streams the output back. A client keeps
a full-screen scrollback view of that output with a single command row.
"""

__version__ = "0.1.0"
