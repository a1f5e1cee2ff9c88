"""Tests for mint extraction and batch source classification."""

from config.settings import PUMPFUN_PROGRAM_ID
from trustfeed.models import TokenSource
from trustfeed.services.ingest.extractor import classify_batch_source, extract_mints, is_graduation
from trustfeed.services.ingest.schemas import WebhookTransaction

from .conftest import make_mint


def _tx(*mints, program_ids=()):
    return WebhookTransaction.model_validate(
        {
            "signature": "sig",
            "tokenTransfers": [{"mint": mint} for mint in mints],
            "instructions": [{"programId": pid} for pid in program_ids],
        }
    )


class TestExtractMints:
    """Distinct mints across all transfers"""

    def test_dedup_across_transactions(self):
        """Same mint in three transfers is one subject"""
        m = make_mint(1)
        txs = [_tx(m), _tx(m, make_mint(2)), _tx(m)]

        assert extract_mints(txs) == {m, make_mint(2)}

    def test_missing_transfers(self):
        """Transactions without tokenTransfers yield nothing"""
        txs = [WebhookTransaction.model_validate({"signature": "x"}), _tx()]

        assert extract_mints(txs) == set()

    def test_transfer_without_mint_ignored(self):
        """Transfer entries without mint are skipped"""
        tx = WebhookTransaction.model_validate({"tokenTransfers": [{"amount": 1}, {"mint": make_mint(3)}]})

        assert extract_mints([tx]) == {make_mint(3)}


class TestClassifyBatchSource:
    """Graduation detection is batch wide"""

    def test_graduation_in_second_transaction(self):
        """One graduation tx tags the whole delivery"""
        txs = [
            _tx(make_mint(1)),
            _tx(make_mint(2), program_ids=["11111111111111111111111111111111", PUMPFUN_PROGRAM_ID]),
            _tx(make_mint(3)),
        ]

        assert classify_batch_source(txs, PUMPFUN_PROGRAM_ID) is TokenSource.PUMPFUN_GRADUATED

    def test_no_graduation(self):
        """Plain mints are helius_webhook"""
        txs = [_tx(make_mint(1), program_ids=["TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"])]

        assert classify_batch_source(txs, PUMPFUN_PROGRAM_ID) is TokenSource.HELIUS_WEBHOOK

    def test_is_graduation_without_instructions(self):
        """Missing instructions list is not a graduation"""
        assert not is_graduation(_tx(make_mint(1)), PUMPFUN_PROGRAM_ID)
