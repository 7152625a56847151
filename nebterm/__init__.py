"""nebterm - terminal client for OpenNebula-style virtualization management.

This package drives a remote XML-RPC management API:
- XML-RPC wire codec and the embedded XML document transcoder
- Declarative resource registry (YAML definitions, pydantic schemas)
- Service dispatcher and hierarchical navigation/pagination engine
"""

__version__ = "0.1.0"
