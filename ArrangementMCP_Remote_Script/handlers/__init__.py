from . import arrangement, clips, midi, session  # noqa: F401
