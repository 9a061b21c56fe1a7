from .audience_events import register_audience_events
from .speaker_events import register_speaker_events


def register_sockets(socketio):
    register_audience_events(socketio)
    register_speaker_events(socketio)
