"""Reference component under test and its suite."""
