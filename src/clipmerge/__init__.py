"""clipmerge — merge an ordered list of video clips into one file.

Sources are laid end to end on a single timeline. Every clip except the
last drops to zero opacity at its own end, and the composed timeline is
encoded off the caller's thread and optionally persisted to a sink.
"""
