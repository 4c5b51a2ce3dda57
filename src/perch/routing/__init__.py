"""Routing — resource registry, capability vocabulary, and dispatch.

Resources are registered during setup; each registration probes the
resource once and stores its capability table. The dispatcher reads the
frozen registry on every request.
"""
