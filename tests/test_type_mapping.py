# tests/test_type_mapping.py
import pytest

from warehouse_pipeline.schema.type_mapping import (
    DEFAULT_MAPPINGS, DEFAULT_NO_LENGTH_TYPES, DEFAULT_TYPE_MAPPING, TypeMapping
)


class TestResolveTargetType:
    """Source to target type lookup."""

    @pytest.mark.parametrize('source, target', [
        ('jsonb', 'varchar'),
        ('text', 'varchar'),
        ('int8', 'bigint'),
        ('int4', 'integer'),
        ('uuid', 'char'),
        ('numeric', 'decimal'),
    ])
    def test_default_mappings(self, source, target):
        assert DEFAULT_TYPE_MAPPING.resolve_target_type(source) == target

    def test_unknown_type_passes_through(self):
        assert DEFAULT_TYPE_MAPPING.resolve_target_type('char') == 'char'
        assert DEFAULT_TYPE_MAPPING.resolve_target_type('my_enum') == 'my_enum'

    def test_lookup_is_case_sensitive_on_source(self):
        """Source udt names are lowercase; other spellings pass through."""
        assert DEFAULT_TYPE_MAPPING.resolve_target_type('JSONB') == 'JSONB'

    def test_custom_mapping(self):
        mapping = TypeMapping({'jsonb': 'super'}, ['super'])
        assert mapping.resolve_target_type('jsonb') == 'super'
        assert mapping.resolve_target_type('int8') == 'int8'


class TestRequiresLength:
    """Which target types take a length argument."""

    @pytest.mark.parametrize('target', sorted(DEFAULT_NO_LENGTH_TYPES))
    def test_no_length_types(self, target):
        assert DEFAULT_TYPE_MAPPING.requires_length(target) is False

    def test_case_insensitive(self):
        assert DEFAULT_TYPE_MAPPING.requires_length('BIGINT') is False
        assert TypeMapping(no_length_types=['BIGINT']).requires_length('bigint') is False

    def test_length_types(self):
        assert DEFAULT_TYPE_MAPPING.requires_length('varchar') is True
        assert DEFAULT_TYPE_MAPPING.requires_length('char') is True


class TestImmutability:
    """Mapping tables cannot be changed after construction."""

    def test_mappings_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_TYPE_MAPPING.mappings['jsonb'] = 'super'

    def test_source_dict_is_copied(self):
        source = {'jsonb': 'super'}
        mapping = TypeMapping(source)
        source['jsonb'] = 'varchar'
        assert mapping.resolve_target_type('jsonb') == 'super'

    def test_defaults_used_when_not_given(self):
        mapping = TypeMapping()
        assert dict(mapping.mappings) == dict(DEFAULT_MAPPINGS)
        assert mapping.no_length_types == DEFAULT_NO_LENGTH_TYPES
