"""Tests for src/wayfarer/engine/combat_units.py."""
from __future__ import annotations

from helpers.catalog import GOBLIN, HUMAN
from helpers.rng import FixedRandom
from wayfarer.engine.combat_units import CombatUnitService
from wayfarer.engine.entity_registry import EntityRegistry
from wayfarer.models.character import Character
from wayfarer.models.entity import EntityCategory, EntityDefinition


def _character(**kw) -> Character:
    defaults = dict(id=7, name="Bren", race_id="human", level=1, max_hp=100, current_hp=100, attack=15)
    defaults.update(kw)
    return Character(**defaults)


class TestResolveDefinition:
    def test_known_race(self, units):
        assert units.resolve_definition("goblin") == GOBLIN

    def test_unknown_race_falls_back_to_human(self, units, caplog):
        definition = units.resolve_definition("elf")
        assert definition.id == "human"
        assert "elf" in caplog.text

    def test_fallback_follows_registry_updates(self, registry, units):
        registry.update(HUMAN.model_copy(update={"attack": 20}))
        assert units.resolve_definition("elf").attack == 20


class TestCreateUnit:
    def test_stats_scale_with_level(self, units):
        unit = units.create_unit(_character(level=3, max_hp=1, current_hp=1, attack=1), is_player=True)
        assert unit.max_hp == 130
        assert unit.attack == 19

    def test_recorded_stats_act_as_floor(self, units):
        unit = units.create_unit(_character(max_hp=140, current_hp=140, attack=30), is_player=True)
        assert unit.max_hp == 140
        assert unit.attack == 30

    def test_player_carries_damage(self, units):
        unit = units.create_unit(_character(current_hp=40), is_player=True)
        assert unit.current_hp == 40
        assert unit.is_alive
        assert unit.experience_reward is None
        assert unit.money_reward is None

    def test_enemy_starts_full(self, units, goblin_character):
        wounded = goblin_character.model_copy(update={"current_hp": 3})
        unit = units.create_unit(wounded)
        assert unit.current_hp == unit.max_hp == 30
        assert not unit.is_player

    def test_enemy_default_rewards(self, units, goblin_character):
        unit = units.create_unit(goblin_character)
        assert unit.experience_reward == 50
        assert unit.money_reward == 0

    def test_definition_reward_overrides(self):
        boss = EntityDefinition(
            id="lich", name="Lich", level=8, max_hp=200, attack=40,
            category=EntityCategory.MONSTER, experience_reward=999, money_reward=77,
        )
        service = CombatUnitService(EntityRegistry([HUMAN, boss]))
        unit = service.create_unit(Character(id=-1, name="Lich", race_id="lich", level=8, max_hp=200, current_hp=200, attack=40))
        assert unit.experience_reward == 999
        assert unit.money_reward == 77

    def test_ids_are_monotonic(self, units, hero, goblin_character):
        ids = [u.id for u in units.create_units([hero, goblin_character, goblin_character])]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_reset_ids(self, units, hero):
        units.create_unit(hero)
        units.reset_ids()
        assert units.create_unit(hero).id == 1


class TestArithmetic:
    def test_apply_damage_floors_at_zero(self, units, goblin_character):
        unit = units.create_unit(goblin_character)
        hit = units.apply_damage(unit, 500)
        assert hit.current_hp == 0
        assert not hit.is_alive
        assert unit.current_hp == 30

    def test_heal_caps_at_max(self, units, hero):
        unit = units.create_unit(hero.model_copy(update={"current_hp": 90}), is_player=True)
        assert units.heal_unit(unit, 50).current_hp == 100
        assert units.heal_unit(unit, 5).current_hp == 95

    def test_is_combat_over(self, units, hero, goblin_character):
        player = units.create_unit(hero, is_player=True)
        enemy = units.create_unit(goblin_character)
        assert not units.is_combat_over([player], [enemy]).is_over
        won = units.is_combat_over([player], [units.apply_damage(enemy, 99)])
        assert won.is_over and won.player_won
        lost = units.is_combat_over([units.apply_damage(player, 999)], [enemy])
        assert lost.is_over and not lost.player_won

    def test_rewards_count_only_defeated(self, units, goblin_character):
        alive, dead_a, dead_b = units.create_units([goblin_character] * 3)
        dead_a = units.apply_damage(dead_a, 99)
        dead_b = units.apply_damage(dead_b, 99)
        enemies = [alive, dead_a, dead_b]
        assert units.experience_gain(enemies) == 100
        assert units.experience_gain(enemies) == 100

    def test_calculate_damage_uses_service_rng(self, registry, hero, goblin_character):
        service = CombatUnitService(registry, FixedRandom(0.5))
        assert service.calculate_damage(service.create_unit(hero, True), service.create_unit(goblin_character)) == 15


class TestUpdateCharacterAfterCombat:
    def test_experience_and_hp(self, units, hero):
        unit = units.create_unit(hero, is_player=True)
        updated = units.update_character_after_combat(hero, units.apply_damage(unit, 30), 50)
        assert updated.experience == 50
        assert updated.level == 1
        assert updated.current_hp == 70
        assert updated.currency == hero.currency

    def test_level_up_recomputes_stats_but_not_hp(self, units, hero):
        unit = units.apply_damage(units.create_unit(hero, is_player=True), 40)
        updated = units.update_character_after_combat(hero, unit, 300)
        assert updated.level == 3
        assert updated.max_hp == 130
        assert updated.attack == 19
        assert updated.current_hp == 60

    def test_level_never_drops(self, units, hero):
        veteran = hero.model_copy(update={"level": 5, "experience": 0, "max_hp": 160, "current_hp": 160, "attack": 24})
        unit = units.create_unit(veteran, is_player=True)
        updated = units.update_character_after_combat(veteran, unit, 0)
        assert updated.level == 5
        assert updated.max_hp == 160

    def test_original_is_untouched(self, units, hero):
        unit = units.create_unit(hero, is_player=True)
        units.update_character_after_combat(hero, unit, 500)
        assert hero.experience == 0
        assert hero.level == 1
