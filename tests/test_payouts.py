from pokerclock_core import (
    aggregate_prize_pool,
    compute_payouts,
    ordinal,
    payout_bracket,
    summarize_tournament,
)


def _tiers(payouts):
    return [(p.position, p.percentage, p.amount) for p in payouts]


def test_two_places_paid_for_seven_entries():
    assert _tiers(compute_payouts(7, 700)) == [(1, 65, 455), (2, 35, 245)]


def test_rake_is_withheld_before_the_split():
    payouts = compute_payouts(25, 2500, rake_percentage=10)
    assert _tiers(payouts) == [(1, 40, 900), (2, 30, 675), (3, 20, 450), (4, 10, 225)]
    assert sum(p.amount for p in payouts) == 2250


def test_bracket_boundaries():
    assert payout_bracket(1) == (100,)
    assert payout_bracket(4) == (100,)
    assert payout_bracket(5) == (65, 35)
    assert payout_bracket(10) == (65, 35)
    assert payout_bracket(11) == (50, 30, 20)
    assert payout_bracket(20) == (50, 30, 20)
    assert payout_bracket(21) == (40, 30, 20, 10)
    assert payout_bracket(500) == (40, 30, 20, 10)


def test_no_payouts_without_entries_or_money():
    assert compute_payouts(0, 1000) == []
    assert compute_payouts(5, 0) == []
    assert compute_payouts(-1, 1000) == []


def test_custom_percentages_are_used_verbatim():
    payouts = compute_payouts(3, 1000, custom_percentages=[70, 30])
    assert _tiers(payouts) == [(1, 70, 700), (2, 30, 300)]
    # A sum other than 100 is trusted, not rejected or rescaled.
    short = compute_payouts(30, 1000, custom_percentages=[60, 30])
    assert _tiers(short) == [(1, 60, 600), (2, 30, 300)]


def test_empty_custom_list_falls_back_to_brackets():
    assert len(compute_payouts(12, 1200, custom_percentages=[])) == 3


def test_each_tier_rounds_independently():
    payouts = compute_payouts(12, 1001)
    assert [p.amount for p in payouts] == [501, 300, 200]
    # Halves round up, so the tiers can add up to more than the pool.
    split = compute_payouts(2, 5, custom_percentages=[50, 50])
    assert [p.amount for p in split] == [3, 3]


def test_ordinal_labels():
    assert [ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101)] == [
        "1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st",
    ]


def test_player_with_reentries_and_bonus_contributes_entries_and_bonus():
    bonuses = [{"id": "early", "cost": 20, "chips": 5000}]
    players = [{"id": "p1", "status": "active", "reEntries": 2, "appliedBonuses": ["early"]}]
    summary = aggregate_prize_pool(players, buy_in=50, starting_chips=10000, bonuses=bonuses)
    assert summary.total_entries == 3
    assert summary.gross_prize_pool == 3 * 50 + 20
    assert summary.total_chips == 3 * 10000 + 5000


def test_bonus_can_be_applied_more_than_once_and_unknown_ids_count_zero():
    bonuses = [{"id": "addon", "cost": 10, "chips": 2000}]
    players = [
        {"id": "p1", "reEntries": 0, "appliedBonuses": ["addon", "addon", "ghost"]},
        {"id": "p2", "reEntries": 1, "appliedBonuses": []},
    ]
    summary = aggregate_prize_pool(players, buy_in=20, starting_chips=1000, bonuses=bonuses)
    assert summary.total_entries == 3
    assert summary.gross_prize_pool == 60 + 20
    assert summary.total_chips == 3000 + 4000


def test_average_stack_uses_active_players_only():
    players = [
        {"id": "a", "status": "active", "reEntries": 0},
        {"id": "b", "status": "active", "reEntries": 0},
        {"id": "c", "status": "eliminated", "reEntries": 0},
    ]
    summary = aggregate_prize_pool(players, buy_in=10, starting_chips=1000)
    assert summary.active_players == 2
    assert summary.average_stack == 1500


def test_average_stack_falls_back_to_starting_chips():
    players = [{"id": "a", "status": "eliminated", "reEntries": 0}]
    assert aggregate_prize_pool(players, 10, 5000).average_stack == 5000
    assert aggregate_prize_pool([], 10, 5000).average_stack == 5000


def test_rake_amount_and_net_pool():
    players = [{"id": str(i), "reEntries": 0} for i in range(4)]
    summary = aggregate_prize_pool(players, 25, 1000, rake_percentage=10)
    assert summary.gross_prize_pool == 100
    assert summary.rake_amount == 10
    assert summary.net_prize_pool == 90


def test_negative_inputs_flow_through_without_raising():
    summary = aggregate_prize_pool([{"id": "a", "reEntries": 0}], buy_in=-10, starting_chips=100)
    assert summary.gross_prize_pool == -10
    assert compute_payouts(summary.total_entries, summary.gross_prize_pool) == []


def test_summarize_tournament_record():
    record = {
        "id": "t1",
        "buyIn": 100,
        "startingChips": 20000,
        "rakePercentage": 10,
        "customPayouts": [],
        "bonuses": [{"id": "b", "cost": 0, "chips": 1000}],
        "players": [
            {"id": str(i), "status": "active", "reEntries": 0, "appliedBonuses": ["b"]}
            for i in range(8)
        ],
    }
    summary = summarize_tournament(record)
    assert summary.prize_pool.total_entries == 8
    assert summary.prize_pool.total_chips == 8 * 21000
    assert summary.prize_pool.net_prize_pool == 720
    assert [(p.position, p.amount) for p in summary.payouts] == [(1, 468), (2, 252)]
