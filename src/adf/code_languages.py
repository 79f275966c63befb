"""Fenced code block language names mapped to Confluence code block languages."""

MARKDOWN_TO_CONFLUENCE_LANGUAGE = {
    "1c": "1c",
    "abap": "abap",
    "actionscript": "actionscript3",
    "as3": "actionscript3",
    "ada": "ada",
    "applescript": "applescript",
    "arduino": "arduino",
    "autoit": "autoit",
    "bash": "bash",
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "c": "c",
    "c#": "csharp",
    "cs": "csharp",
    "csharp": "csharp",
    "c++": "cpp",
    "cpp": "cpp",
    "cc": "cpp",
    "clojure": "clojure",
    "clj": "clojure",
    "coffeescript": "coffeescript",
    "coffee": "coffeescript",
    "css": "css",
    "cuda": "cuda",
    "d": "d",
    "dart": "dart",
    "diff": "diff",
    "patch": "diff",
    "elixir": "elixir",
    "ex": "elixir",
    "erlang": "erlang",
    "erl": "erlang",
    "fortran": "fortran",
    "foxpro": "foxpro",
    "go": "go",
    "golang": "go",
    "graphql": "graphql",
    "groovy": "groovy",
    "haskell": "haskell",
    "hs": "haskell",
    "haxe": "haxe",
    "html": "html",
    "xhtml": "html",
    "java": "java",
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "json": "json",
    "julia": "julia",
    "kotlin": "kotlin",
    "kt": "kotlin",
    "latex": "latex",
    "tex": "latex",
    "lisp": "lisp",
    "livescript": "livescript",
    "lua": "lua",
    "mathematica": "mathematica",
    "matlab": "matlab",
    "md": "markdown",
    "markdown": "markdown",
    "objective-c": "objective-c",
    "objc": "objective-c",
    "objective-j": "objective-j",
    "ocaml": "ocaml",
    "octave": "octave",
    "pascal": "pascal",
    "perl": "perl",
    "pl": "perl",
    "php": "php",
    "plaintext": "text",
    "text": "text",
    "txt": "text",
    "powershell": "powershell",
    "ps1": "powershell",
    "prolog": "prolog",
    "puppet": "puppet",
    "python": "python",
    "py": "python",
    "qml": "qml",
    "r": "r",
    "racket": "racket",
    "rst": "restructuredtext",
    "ruby": "ruby",
    "rb": "ruby",
    "rust": "rust",
    "rs": "rust",
    "sass": "sass",
    "scss": "sass",
    "scala": "scala",
    "scheme": "scheme",
    "smalltalk": "smalltalk",
    "sql": "sql",
    "swift": "swift",
    "tcl": "tcl",
    "toml": "toml",
    "ts": "typescript",
    "tsx": "typescript",
    "typescript": "typescript",
    "vala": "vala",
    "vb": "vbnet",
    "vbnet": "vbnet",
    "verilog": "verilog",
    "vhdl": "vhdl",
    "xml": "xml",
    "xquery": "xquery",
    "yaml": "yaml",
    "yml": "yaml",
}
