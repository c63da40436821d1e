"""Static map registry service.

This package contains a small FastAPI service that registers geospatial
static map files. Clients upload a file together with a title; the file is
written to local storage and a record pointing at it is appended to an
in-memory registry that can be listed back.

- Streams uploads to storage before anything is registered
- Keeps registered static maps in insertion order behind a single lock
- Caps request bodies before they are buffered
- Reports every failure as a structured ``{"error", "detail"}`` body

The registry is volatile: its contents are lost when the process exits.
"""
