# timing/exceptions.py
"""
Errors raised by race-timing operations.

Every subclass carries a message fit for the operator console; the
websocket consumer sends it back to the originating connection only.
"""


class RaceError(Exception):
    message = "Race operation failed."
    bib_message = None

    def __init__(self, bib=None, message=None):
        self.bib = bib
        if message is None:
            if bib is not None and self.bib_message:
                message = self.bib_message.format(bib=bib)
            else:
                message = self.message
        self.message = message
        super().__init__(message)


class UnknownBib(RaceError):
    message = "Unknown bib number."
    bib_message = "Bib {bib} is not registered."


class RaceNotStarted(RaceError):
    message = "The race has not started yet."
    bib_message = "Bib {bib} has not started yet."


class AlreadyFinished(RaceError):
    message = "Runner already has a finish time."
    bib_message = "Bib {bib} already has a finish time."


class NoFinishRecorded(RaceError):
    message = "Runner has no finish time to cancel."
    bib_message = "Bib {bib} has no finish time to cancel."


class AlreadyStarted(RaceError):
    message = "The race has already started."


class InvalidTransition(RaceError):
    message = "Race cannot move between those phases."


class InvalidPayload(RaceError):
    message = "Malformed request."


class PersistenceFailure(RaceError):
    message = "Server error, the change was not saved. Please retry."
