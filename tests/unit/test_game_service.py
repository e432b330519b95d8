"""Game economy rules: balances never go negative."""

from __future__ import annotations

import asyncio
import random

import pytest

from qgame.chains.seed import seed_chains
from qgame.game.service import (
    MINER_UPGRADES,
    get_or_create_game_user,
    make_prediction,
    place_stake,
    upgrade_miner,
    username_from_claims,
)
from qgame.schemas import CreatePredictionRequest, CreateStakeRequest
from qgame.storage import InsufficientTokensError, MemStorage, NotFoundError


class TestUsernameFromClaims:
    def test_uses_email_local_part(self):
        assert username_from_claims({"email": "vitalik@example.com"}) == "vitalik"

    def test_falls_back_to_numbered_user(self):
        name = username_from_claims({"sub": "abc"}, random.Random(0))
        assert name.startswith("User")
        assert 0 <= int(name[4:]) < 1000

    def test_empty_local_part_falls_back(self):
        assert username_from_claims({"email": "@example.com"}, random.Random(0)).startswith("User")


class TestGetOrCreateGameUser:
    @pytest.mark.asyncio
    async def test_creates_once(self, mem_storage: MemStorage):
        claims = {"sub": "sub-1", "email": "ada@example.com"}
        first = await get_or_create_game_user(mem_storage, claims)
        second = await get_or_create_game_user(mem_storage, claims)

        assert first.id == second.id
        assert first.username == "ada"
        assert first.email == "ada@example.com"
        assert first.tokens == 1000

    @pytest.mark.asyncio
    async def test_numeric_subject_is_stringified(self, mem_storage: MemStorage):
        user = await get_or_create_game_user(mem_storage, {"sub": 12345})
        assert user.auth_id == "12345"


class TestUpgradeMiner:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("miner_type", ["gpu", "asic"])
    async def test_deducts_cost_and_adds_power(self, mem_storage: MemStorage, miner_type):
        user = await get_or_create_game_user(mem_storage, {"sub": "s", "email": "s@x.io"})
        cost, gain = MINER_UPGRADES[miner_type]

        updated = await upgrade_miner(mem_storage, user, miner_type)

        assert updated.tokens == 1000 - cost
        assert updated.mining_power == gain

    @pytest.mark.asyncio
    async def test_farm_too_expensive_for_new_user(self, mem_storage: MemStorage):
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})
        with pytest.raises(InsufficientTokensError):
            await upgrade_miner(mem_storage, user, "farm")

        unchanged = await mem_storage.get_user(user.id)
        assert unchanged.tokens == 1000
        assert unchanged.mining_power == 0

    @pytest.mark.asyncio
    async def test_exact_balance_is_enough(self, mem_storage: MemStorage):
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})
        user = await mem_storage.update_user_tokens(user.id, 500)
        updated = await upgrade_miner(mem_storage, user, "asic")
        assert updated.tokens == 0
        assert updated.mining_power == 10


class TestPlaceStake:
    @pytest.mark.asyncio
    async def test_debits_balance(self, mem_storage: MemStorage):
        await seed_chains(mem_storage)
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})

        stake = await place_stake(mem_storage, user, CreateStakeRequest(chain_id=2, amount=400))

        assert stake.user_id == user.id
        assert stake.active is True
        assert (await mem_storage.get_user(user.id)).tokens == 600

    @pytest.mark.asyncio
    async def test_rejects_overdraw(self, mem_storage: MemStorage):
        await seed_chains(mem_storage)
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})

        with pytest.raises(InsufficientTokensError):
            await place_stake(mem_storage, user, CreateStakeRequest(chain_id=1, amount=1000.01))

        assert (await mem_storage.get_user(user.id)).tokens == 1000
        assert await mem_storage.get_user_stakes(user.id) == []

    @pytest.mark.asyncio
    async def test_rejects_unknown_chain(self, mem_storage: MemStorage):
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})
        with pytest.raises(NotFoundError):
            await place_stake(mem_storage, user, CreateStakeRequest(chain_id=99, amount=1))
        assert (await mem_storage.get_user(user.id)).tokens == 1000


class TestMakePrediction:
    @pytest.mark.asyncio
    async def test_records_pending_prediction(self, mem_storage: MemStorage):
        await seed_chains(mem_storage)
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})
        prediction = await make_prediction(
            mem_storage,
            user,
            CreatePredictionRequest(type="tps_spike", target_chain_id=3, predicted_value=2000),
        )
        assert prediction.resolved is False
        assert prediction.won is None
        assert prediction.user_id == user.id

    @pytest.mark.asyncio
    async def test_rejects_unknown_chain(self, mem_storage: MemStorage):
        user = await get_or_create_game_user(mem_storage, {"sub": "s"})
        with pytest.raises(NotFoundError):
            await make_prediction(
                mem_storage,
                user,
                CreatePredictionRequest(type="block_time", target_chain_id=404, predicted_value=1),
            )


class TestConcurrentSpending:
    """Parallel requests from one user must not spend the same tokens twice."""

    @pytest.mark.asyncio
    async def test_parallel_stakes_cannot_overdraw(self, storage):
        await seed_chains(storage)
        user = await get_or_create_game_user(storage, {"sub": "s"})

        results = await asyncio.gather(
            place_stake(storage, user, CreateStakeRequest(chain_id=1, amount=1000)),
            place_stake(storage, user, CreateStakeRequest(chain_id=2, amount=1000)),
            return_exceptions=True,
        )

        assert sum(isinstance(r, InsufficientTokensError) for r in results) == 1
        assert (await storage.get_user(user.id)).tokens == 0
        stakes = await storage.get_user_stakes(user.id)
        assert [s.amount for s in stakes] == [1000]

    @pytest.mark.asyncio
    async def test_parallel_upgrades_cannot_overdraw(self, storage):
        user = await get_or_create_game_user(storage, {"sub": "s"})
        user = await storage.update_user_tokens(user.id, 600)

        results = await asyncio.gather(
            upgrade_miner(storage, user, "asic"),
            upgrade_miner(storage, user, "asic"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, InsufficientTokensError) for r in results) == 1
        reloaded = await storage.get_user(user.id)
        assert reloaded.tokens == 100
        assert reloaded.mining_power == 10


class TestUsernameFromOddClaims:
    @pytest.mark.parametrize("email", [12345, ["a@b.c"], {"x": 1}])
    def test_non_string_email_falls_back(self, email):
        name = username_from_claims({"sub": "s", "email": email}, random.Random(1))
        assert name.startswith("User")

    @pytest.mark.asyncio
    async def test_non_string_email_is_not_stored(self, mem_storage: MemStorage):
        user = await get_or_create_game_user(mem_storage, {"sub": "s", "email": 42})
        assert user.email is None
        assert user.username.startswith("User")
