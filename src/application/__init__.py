"""
Application layer - Use case orchestration and services

This layer contains:
- Bootstrap (ApplicationContext with the single PlaybackEngine)
- Settings managers
- Section service
"""
