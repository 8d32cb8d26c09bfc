"""
Language-specific modules for the Anonymizer.

This package contains the per-language handling:
- base: Language registry and lexical rules
- c_keywords / ocaml_keywords: Keyword and builtin tables
- include_resolver: C #include handling
- header_symbols: C header declaration scanning
- ocaml_stdlib: OCaml standard library scanning
"""
