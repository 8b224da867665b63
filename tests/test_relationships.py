from epq.domain.relationships import clamp_relationship, count_high, count_maxed, count_minned, relationship_status


def test_clamp_relationship() -> None:
    assert clamp_relationship(150) == 100
    assert clamp_relationship(-101) == -100
    assert clamp_relationship(12) == 12


def test_relationship_status_bands() -> None:
    assert relationship_status(100) == "Devoted Ally"
    assert relationship_status(80) == "Devoted Ally"
    assert relationship_status(79) == "Trusted Friend"
    assert relationship_status(0) == "Neutral"
    assert relationship_status(-10) == "Neutral"
    assert relationship_status(-11) == "Unfriendly"
    assert relationship_status(-81) == "Mortal Enemy"


def test_relationship_counts() -> None:
    scores = {"maria": 100, "gomez": 55, "ramirez": -100, "torres": 0}

    assert count_maxed(scores) == 1
    assert count_minned(scores) == 1
    assert count_high(scores) == 2
    assert count_high(scores, threshold=60) == 1
