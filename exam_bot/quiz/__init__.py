"""Quiz session engine: answers, question sets, session state, navigation, scoring."""
