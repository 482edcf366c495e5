"""PhantomScan - audit a directory tree as a simulated user and group set."""

__version__ = "0.3.0"
