"""
Yorisoi Relay - An empathetic voice chat relay service.

This package provides a small webserver that scores incoming chat messages,
tags them with ICF functioning domains, escalates crisis messages to a fixed
safety response and relays everything else to an LLM completion service and a
text-to-speech service.
"""

__version__ = "0.1.0"
