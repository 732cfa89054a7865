"""inkwell: credential rotation and abuse mitigation for the blog backend."""
