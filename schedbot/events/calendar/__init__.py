"""
Event Calendar Module.

Each channel of each server keeps its own calendar of upcoming events.
Members create events, respond to them with yes, no or maybe, and the
calendar forgets events once their scheduled time has passed.

Events are stored per channel partition by the event store, which
serializes every read-modify-write on a partition and writes the whole
partition record atomically.
"""
