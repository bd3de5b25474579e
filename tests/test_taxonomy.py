"""Tests for the intent taxonomy and keyword helpers."""

from twin.intent.taxonomy import (
    INTENT_RULES,
    PRECEDENCE,
    DocumentSubType,
    Intent,
    document_sub_type,
    find_keyword,
    mentions_named_contact,
    normalize_text,
)


class TestTaxonomy:
    """Test the intent table."""

    def test_precedence_covers_every_intent_once(self):
        """Test that the decision order lists each intent exactly once."""
        assert sorted(PRECEDENCE) == sorted(Intent)
        assert len(PRECEDENCE) == len(set(PRECEDENCE))

    def test_generic_is_last(self):
        """Test that Generic is the default at the end of the decision order."""
        assert PRECEDENCE[-1] == Intent.GENERIC
        assert PRECEDENCE[0] == Intent.INVOICE_SEARCH

    def test_every_intent_has_a_rule(self):
        """Test that the keyword table is total."""
        assert set(INTENT_RULES) == set(Intent)
        for intent, rule in INTENT_RULES.items():
            assert rule.intent == intent
            assert rule.examples

    def test_keywords_are_normalized(self):
        """Test that stored keywords match their normalized form."""
        for rule in INTENT_RULES.values():
            for keyword in rule.keywords:
                assert normalize_text(keyword) == keyword


class TestNormalizeText:
    """Test text normalization."""

    def test_strips_accents_and_punctuation(self):
        assert normalize_text("¿Cuánto he gastado este AÑO?") == "cuanto he gastado este ano"

    def test_keeps_currency_symbols(self):
        assert normalize_text("Más de $500") == "mas de $500"

    def test_collapses_whitespace(self):
        assert normalize_text("  hola \n  twin ") == "hola twin"


class TestFindKeyword:
    """Test whole-word keyword matching."""

    def test_matches_whole_words_only(self):
        assert find_keyword("mis fotografias", ("foto",)) is None
        assert find_keyword("mis fotos", ("fotos",)) == "fotos"

    def test_matches_phrases(self):
        assert find_keyword("cual es mi email", ("mi email",)) == "mi email"

    def test_prefers_longer_alternative(self):
        assert find_keyword("phone number of ana", ("phone of", "phone number of")) == "phone number of"

    def test_empty_inputs(self):
        assert find_keyword("", ("foto",)) is None
        assert find_keyword("foto", ()) is None


class TestNamedContact:
    """Test proper-name detection next to contact nouns."""

    def test_name_with_contact_noun(self):
        assert mentions_named_contact("Necesito el celular de Ana Ruiz")

    def test_sentence_initial_capital_is_not_a_name(self):
        assert not mentions_named_contact("Teléfono de la oficina")

    def test_name_without_contact_noun(self):
        assert not mentions_named_contact("Hola Twin, saluda a Ana")


class TestDocumentSubType:
    """Test document sub-type detection."""

    def test_known_sub_types(self):
        assert document_sub_type("busca mis contratos") == DocumentSubType.CONTRACTS
        assert document_sub_type("tienes mi licencia") == DocumentSubType.LICENSES
        assert document_sub_type("encuentra certificados") == DocumentSubType.CERTIFICATES

    def test_unspecific_document(self):
        assert document_sub_type("busca mis documentos") == DocumentSubType.OTHER
