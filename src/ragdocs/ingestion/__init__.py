"""
Ingestion: content acquisition, chunking, embedding and upsert.

Turns a URL (web page or PDF) into embedded chunks stored in the
vector store, one chunk at a time.
"""
