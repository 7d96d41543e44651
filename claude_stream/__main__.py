"""Allow `python -m claude_stream`."""

from claude_stream.cli import app

if __name__ == "__main__":
    app()
