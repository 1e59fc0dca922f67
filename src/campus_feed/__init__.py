"""Campus Feed: post detail, threaded comments and votes for the campus app."""

__version__ = "0.1.0"
