"""Interval histograms of integers from files, exchanged between a server and a client over file-backed message queues."""

__version__ = "0.1.0"

__all__ = ["protocol", "mqueue", "histogram", "server", "client"]