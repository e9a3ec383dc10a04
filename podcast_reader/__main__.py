"""Package entry point for ``python -m podcast_reader``.

WHY: Lets the API server start without installing the console script.

HOW: Delegates to server.app.run_api(), which serves on port 8000.
"""

if __name__ == "__main__":
    from podcast_reader.server.app import run_api
    run_api()
