"""
Execview Shared Module
======================

Configuration, logging and console utilities used by the decoder and
its command-line front end.
"""

from shared.config import ExecviewConfig

__all__ = ["ExecviewConfig"]
