"""Addition and subtraction drills with German feedback."""
