"""Request validation and wire aliases."""

import pytest
from pydantic import ValidationError

from qgame.schemas import (
    ChainStatsUpdate,
    CreatePredictionRequest,
    CreateStakeRequest,
    MinerUpgradeRequest,
    NewChain,
)


class TestStakeRequest:
    def test_accepts_camel_case(self):
        req = CreateStakeRequest.model_validate({"chainId": 2, "amount": 50})
        assert req.chain_id == 2
        assert req.amount == 50

    def test_accepts_snake_case(self):
        req = CreateStakeRequest.model_validate({"chain_id": 2, "amount": 50})
        assert req.chain_id == 2

    @pytest.mark.parametrize("amount", [0, -10])
    def test_rejects_non_positive_amount(self, amount):
        with pytest.raises(ValidationError):
            CreateStakeRequest(chain_id=1, amount=amount)

    def test_rejects_infinite_amount(self):
        with pytest.raises(ValidationError):
            CreateStakeRequest(chain_id=1, amount=float("inf"))

    def test_user_id_in_body_is_ignored(self):
        req = CreateStakeRequest.model_validate({"chainId": 1, "amount": 5, "userId": 99})
        assert not hasattr(req, "user_id")


class TestPredictionRequest:
    def test_valid_types(self):
        for kind in ("tps_spike", "block_time"):
            req = CreatePredictionRequest(type=kind, target_chain_id=1, predicted_value=1.5)
            assert req.type == kind

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            CreatePredictionRequest(type="moon", target_chain_id=1, predicted_value=1)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_rejects_non_finite_value(self, value):
        with pytest.raises(ValidationError):
            CreatePredictionRequest(type="tps_spike", target_chain_id=1, predicted_value=value)


class TestMinerUpgradeRequest:
    def test_rejects_unknown_miner(self):
        with pytest.raises(ValidationError):
            MinerUpgradeRequest(type="fpga")


class TestChainModels:
    def test_rejects_unknown_tier(self):
        with pytest.raises(ValidationError):
            NewChain(name="X", tier="galaxy")

    def test_health_bounded(self):
        with pytest.raises(ValidationError):
            NewChain(name="X", tier="zone", health=101)

    def test_stats_update_tracks_set_fields(self):
        update = ChainStatsUpdate(tps=10)
        assert update.model_dump(exclude_unset=True) == {"tps": 10}

    def test_serializes_camel_case(self):
        chain = NewChain(name="Cyprus", tier="region", parent_id=1, active_miners=3)
        data = chain.model_dump(by_alias=True)
        assert data["parentId"] == 1
        assert data["activeMiners"] == 3
        assert "lastBlockTime" in data


def test_chain_stats_reject_nan():
    with pytest.raises(ValidationError):
        ChainStatsUpdate(tps=float("nan"))
