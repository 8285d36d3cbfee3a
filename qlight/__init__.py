"""
qlight - USB light tower control from the command line and over OSC.

Modules:
    model: Colors, modes and the 65-byte HID report
    router: OSC address routing
    resolver: OSC messages and CLI tokens to command sets
    device: HID enumeration and device sessions
    osc: UDP OSC bridge loop
    cli: qlight command-line tool
    server: qlight-osc entry point
"""

__version__ = "0.1.0"
