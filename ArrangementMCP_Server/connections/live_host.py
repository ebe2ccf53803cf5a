from ArrangementMCP_Server.connections.ableton import AbletonConnection, get_ableton_connection
from ArrangementMCP_Server.engine.host import CommandHost


class LiveHost(CommandHost):
    """Engine host backed by the Remote Script socket."""

    def __init__(self, connection: AbletonConnection):
        super().__init__(connection.send_command)
        self.connection = connection


def get_live_host() -> LiveHost:
    return LiveHost(get_ableton_connection())
