"""printf-style string formatting."""