from agents.quality_analyzer import HeuristicQualityAnalyzer, tier_for_score
from config.scoring import QualityTables


def analyzer():
    return HeuristicQualityAnalyzer()


def test_bare_ok_is_poor():
    report = analyzer().classify("ok", track_id="fullstack")
    assert report.tier == "poor"
    assert "yes_no" in report.matched
    assert "very_short" in report.matched


def test_rich_answer_is_excellent_and_clamped():
    reply = (
        "I built a small React app for my college fest because I love making things people actually use, "
        "and I learned a lot from YouTube tutorials. How does your team test apps?"
    )
    report = analyzer().classify(reply, track_id="fullstack")
    assert report.tier == "excellent"
    assert report.score == 100
    assert {"relevant_tool", "project", "enthusiasm", "learning", "question", "detail", "reasoning"} <= set(report.matched)


def test_short_project_mention_is_good():
    report = analyzer().classify("I made a website for my uncle's shop last summer.", track_id="fullstack")
    assert report.score == 62
    assert report.tier == "good"


def test_short_neutral_answer_is_medium():
    report = analyzer().classify("I have used some tools before", track_id="fullstack")
    assert report.score == 40
    assert report.tier == "medium"


def test_disinterest_penalty():
    report = analyzer().classify("whatever, I guess it doesn't matter", track_id="fullstack")
    assert report.tier == "poor"
    assert "disinterest" in report.matched


def test_generic_stock_phrase_in_short_reply():
    report = analyzer().classify("I'm passionate about tech.", track_id="fullstack")
    assert report.signals.is_generic is True
    assert "generic_short" in report.matched
    assert report.score == 32


def test_single_letter_tool_needs_word_boundary():
    report = analyzer().classify("I am really into reading novels these days", track_id="data-science")
    assert "relevant_tool" not in report.matched
    report = analyzer().classify("I plotted survey data in R last term", track_id="data-science")
    assert "relevant_tool" in report.matched


def test_signals_flag_curiosity_and_empathy():
    signals = analyzer().signals("How would a parent feel using this?")
    assert signals.shows_curiosity
    assert signals.shows_empathy
    assert signals.has_questions
    assert signals.is_short


def test_tier_thresholds():
    tables = QualityTables()
    assert tier_for_score(70, tables) == "excellent"
    assert tier_for_score(69, tables) == "good"
    assert tier_for_score(55, tables) == "good"
    assert tier_for_score(54, tables) == "medium"
    assert tier_for_score(35, tables) == "medium"
    assert tier_for_score(34, tables) == "poor"


def test_unknown_track_falls_back_to_fullstack():
    report = analyzer().classify("I use Flask at work", track_id="does-not-exist")
    assert "relevant_tool" in report.matched
