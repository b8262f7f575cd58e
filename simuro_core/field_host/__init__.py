from simuro_core.field_host.field_host_abstract import AbstractFieldHost, FieldState
from simuro_core.field_host.in_memory_field_host import InMemoryFieldHost

__all__ = ["AbstractFieldHost", "FieldState", "InMemoryFieldHost"]
