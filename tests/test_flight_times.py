from flight_times import NO_TIME, compute_delay_minutes, parse_time_and_delay


def test_two_times_same_day_delay():
    assert parse_time_and_delay("10:05 10:40") == ("10:05", "10:40", 35)
    assert parse_time_and_delay("Sched 6:15\nEst 7:00") == ("6:15", "7:00", 45)


def test_later_tokens_ignored():
    assert parse_time_and_delay("09:00 09:20 11:00") == ("09:00", "09:20", 20)


def test_single_time_has_no_delay():
    assert parse_time_and_delay("  14:30 ") == ("14:30", "14:30", 0)


def test_no_time_tokens():
    for raw in ["", "Cancelled", "12-30", "1230"]:
        assert parse_time_and_delay(raw) == (NO_TIME, NO_TIME, 0)


def test_unreadable_input_falls_back_to_no_times():
    assert parse_time_and_delay(None) == (NO_TIME, NO_TIME, 0)  # type: ignore[arg-type]


def test_overnight_rollover():
    assert compute_delay_minutes("23:50", "00:10") == 20
    assert parse_time_and_delay("23:50 00:10").delay_mins == 20


def test_early_estimate_clamped_to_zero():
    assert compute_delay_minutes("10:00", "09:45") == 0
    # Exactly twelve hours early is still same-day.
    assert compute_delay_minutes("12:00", "00:00") == 0


def test_equal_times_short_circuit():
    assert compute_delay_minutes("07:05", "07:05") == 0
