"""
Core modules for minimax_image.

This package contains the core business logic for:
- Configuration management
- The data model (requests, jobs, image references)
- The Replicate job adapter
- Saving images locally
- Formatting tool responses
"""
