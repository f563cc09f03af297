"""Business logic services.

Pipeline stages, provider adapters, stores and the provider admin service.
Import from the submodules directly; nothing is re-exported here so that
stores and providers can import each other's types without cycles.
"""
