"""QuizGen live quiz core: fan-out of pushed quiz items, answer ledger and analytics."""
