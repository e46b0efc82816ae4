"""
KCQL Grammar - Lark EBNF grammar for Kubernetes Cypher Query Language.

This grammar defines a declarative syntax for expressing:
- Graph patterns over resource kinds: (d:Deployment)-[:OWNS]->(rs:ReplicaSet)
- Property filters and payloads: (d:Deployment {name: "web"})
- WHERE conditions and RETURN projections on field paths
- CREATE / SET / DELETE mutations

Terminals are not matched by Lark: they are produced by the hand-written
lexer in kcql.parser.lexer and only declared here. Underscore-prefixed
terminals are punctuation and keywords that are dropped from the tree.
"""

KCQL_GRAMMAR = r'''
start: statement _SEMICOLON?

?statement: match_query
          | create_query
          | set_query
          | delete_query

match_query: _MATCH patterns where_clause? return_clause?
create_query: _CREATE patterns
set_query: _SET patterns properties
delete_query: _DELETE patterns

// Patterns
patterns: pattern (_COMMA pattern)*

pattern: node (edge node)*

node: _LPAR IDENT _COLON IDENT properties? _RPAR

edge: _DASH _LSQB _COLON IDENT _RSQB _ARROW

// Property blocks: filters on nodes, assignments on SET
properties: _LBRACE (property (_COMMA property)*)? _RBRACE

property: PATH _COLON value

// WHERE conditions, combined with AND
where_clause: _WHERE condition (_COMMA condition)*

condition: PATH COMPARATOR value

// RETURN projections
return_clause: _RETURN PATH (_COMMA PATH)*

value: STRING
     | INT
     | FLOAT
     | BOOLEAN

%declare _MATCH _WHERE _RETURN _CREATE _SET _DELETE
%declare IDENT PATH STRING INT FLOAT BOOLEAN COMPARATOR
%declare _LPAR _RPAR _LBRACE _RBRACE _LSQB _RSQB _COLON _COMMA _DASH _ARROW _SEMICOLON
'''


def get_grammar() -> str:
    """Return the KCQL grammar string for use with Lark."""
    return KCQL_GRAMMAR
