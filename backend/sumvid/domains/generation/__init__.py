"""Generation domain: quota-gated summaries, quizzes and answers."""
