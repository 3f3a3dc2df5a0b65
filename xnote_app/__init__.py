"""xnote_app: settings, background jobs, HTTP API and CLI for the xnote backend."""
