"""lanwake: Wake-on-LAN device registry with liveness probing."""

__version__ = "0.1.0"
