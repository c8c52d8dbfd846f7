"""
Read-only HTTP API over a backup archive stored in MongoDB.

Backups and their files are written by an external ingestion process; this
package lists them and serves inline file contents for download.
"""
