"""Tests for the world model — enemies, player, spawning."""

import random

from typecast.world import Enemy, Player, World, angle_between


class TestEnemy:
    def test_hit_kills_at_zero(self):
        e = Enemy(id=1, name="imp", hp=2, max_hp=2)
        e.on_hit(1)
        assert e.hit_points == 1 and e.is_dead is False
        e.on_hit(5)
        assert e.hit_points == 0 and e.is_dead is True


class TestPlayer:
    def test_invincibility_window(self):
        p = Player(hp=10, invincible_time=1.0)
        assert p.on_hit(3, now=100.0) is True
        assert p.hp == 7
        assert p.is_invincible(100.5) is True
        assert p.on_hit(3, now=100.5) is False
        assert p.hp == 7
        assert p.on_hit(3, now=101.0) is True
        assert p.hp == 4

    def test_dead_player_takes_no_hits(self):
        p = Player(hp=1)
        p.on_hit(5, now=0.0)
        assert p.is_dead is True
        assert p.on_hit(1, now=10.0) is False


class TestAngles:
    def test_shortest_way_round(self):
        assert angle_between(0, 90) == 90
        assert angle_between(350, 10) == 20
        assert angle_between(10, 350) == 20
        assert angle_between(0, 180) == 180


class TestWorld:
    def test_spawn_assigns_unique_ids(self):
        w = World(random.Random(0))
        a, b = w.spawn(), w.spawn()
        assert a.id != b.id
        assert w.get_enemy(a.id) is a
        assert 0.0 <= a.bearing <= 360.0

    def test_spawn_with_explicit_values(self):
        w = World()
        e = w.spawn(hp=3, name="orc", bearing=45.0)
        assert (e.name, e.hp, e.max_hp, e.bearing) == ("orc", 3, 3, 45.0)

    def test_apply_hit_counts_kill_once(self):
        w = World()
        e = w.spawn(hp=2)
        assert w.apply_hit(e.id) is False
        assert w.apply_hit(e.id) is True
        assert w.apply_hit(e.id) is False
        assert w.kills == 1
        assert w.alive() == []

    def test_apply_hit_unknown(self):
        assert World().apply_hit(999999) is False

    def test_despawn_deactivates(self):
        w = World()
        e = w.spawn()
        assert w.despawn(e.id) is e
        assert e.active is False
        assert w.get_enemy(e.id) is None
        assert w.despawn(e.id) is None

    def test_is_eligible(self):
        w = World()
        e = w.spawn()
        assert w.is_eligible(e.id) is True
        w.apply_hit(e.id)
        assert w.is_eligible(e.id) is False
        assert w.is_eligible(999999) is False
