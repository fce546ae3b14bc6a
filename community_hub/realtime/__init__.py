"""Realtime infrastructure (Socket.IO).

One socket server is shared by team chat and per-user notifications. The
:class:`~community_hub.realtime.socketio.ChannelRouter` owns connection state;
``events`` modules build payloads and publish through it.
"""
