# Services package init
"""
notestore — Services Layer
===========================

What:  Orchestration between callers and the external collaborators.

Service Inventory:
    - NoteStore: Result-returning boundary for sessions, notes and images
    - ImageService: staging, upload and download against the image endpoint
"""
