from trainlog.models.goal import Goal


def make_goal(target=10.0, current=0.0):
    return Goal(user_id=1, goal_type="table_sessions", target_value=target,
                current_value=current, is_completed=False)


def test_increment_completes_goal_at_target():
    goal = make_goal(target=3, current=2)

    assert goal.adjust_progress(1) == 3
    assert goal.is_completed


def test_decrement_is_clamped_at_zero():
    goal = make_goal(current=1)

    assert goal.adjust_progress(-5) == 0
    assert not goal.is_completed


def test_completion_is_kept_after_decrement():
    goal = make_goal(target=2, current=1)
    goal.adjust_progress(1)

    goal.adjust_progress(-1)

    assert goal.current_value == 1
    assert goal.is_completed
