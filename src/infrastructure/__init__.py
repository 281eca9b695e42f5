"""
Infrastructure layer - External concerns

This layer contains:
- JSON preferences repository
- Streaming URL resolution (signed URLs over HTTP)
"""
