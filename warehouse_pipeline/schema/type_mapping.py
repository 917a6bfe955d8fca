"""
PostgreSQL to Redshift type mapping

Static lookup from source udt names to warehouse type names, plus the
warehouse types that never take a length argument.
"""

from types import MappingProxyType

# psql data types mapped to redshift data types
DEFAULT_MAPPINGS = MappingProxyType({
    'jsonb': 'varchar',
    'text': 'varchar',
    'int8': 'bigint',
    'int4': 'integer',
    'uuid': 'char',
    'numeric': 'decimal',
})

# these redshift data types do not take length as an arg
DEFAULT_NO_LENGTH_TYPES = frozenset([
    'timestamptz',
    'bool',
    'bigint',
    'integer',
    'decimal',
])


class TypeMapping:
    """Immutable source-to-target type lookup"""

    def __init__(self, mappings=None, no_length_types=None):
        """
        Initialize the mapping

        Args:
            mappings (dict, optional): source type -> target type. Defaults to DEFAULT_MAPPINGS.
            no_length_types (iterable, optional): target types rendered without a length
        """
        if mappings is None:
            mappings = DEFAULT_MAPPINGS
        if no_length_types is None:
            no_length_types = DEFAULT_NO_LENGTH_TYPES

        self._mappings = MappingProxyType(dict(mappings))
        self._no_length_types = frozenset(t.lower() for t in no_length_types)

    @property
    def mappings(self):
        return self._mappings

    @property
    def no_length_types(self):
        return self._no_length_types

    def resolve_target_type(self, source_type):
        """Return the mapped target type, or the source type unchanged if it has no mapping"""
        return self._mappings.get(source_type, source_type)

    def requires_length(self, target_type):
        """Check whether a target type is rendered with a length argument"""
        return target_type.lower() not in self._no_length_types

    def __repr__(self):
        return f"TypeMapping({dict(self._mappings)!r}, {sorted(self._no_length_types)!r})"


DEFAULT_TYPE_MAPPING = TypeMapping()
