"""pomotimer: a Pomodoro timer that runs a fixed number of work/break sets."""

__version__ = "0.1.0"
