"""xnote filesystem library.

Subpackages:
- `xnote.clean`: unused image detection and bounded deletion.
- `xnote.workspace`: default workspace, config file, file tree and search.
"""
