"""Message-bus nodes for a vehicle controller: J1939 keypads and keyboxes, Bluetooth state, control helpers and a text console."""

__version__ = "0.1.0"