from functools import lru_cache

from lark import Lark

TABULA_GRAMMAR = r"""
    start: statement*

    // --- Statements ---
    ?statement: "let" NAME "=" expr ";"                           -> let_stmt
              | postfix "=" expr ";"                              -> assign_stmt
              | "print" expr ";"                                  -> print_stmt
              | "return" expr? ";"                                -> return_stmt
              | "if" expr block elif_clause* else_clause?         -> if_stmt
              | "while" expr block                                -> while_stmt
              | funcdef
              | "table" NAME "{" funcdef* "}"                     -> table_def
              | expr ";"                                          -> expr_stmt

    block: "{" statement* "}"
    elif_clause: "elif" expr block
    else_clause: "else" block

    funcdef: "def" NAME "(" params? ")" block
    params: param ("," param)*
    param: NAME ("=" expr)?

    // --- Expressions ---
    ?expr: or_test

    ?or_test: and_test
            | or_test "or" and_test          -> or_

    ?and_test: not_test
             | and_test "and" not_test       -> and_

    ?not_test: comparison
             | "not" not_test                -> not_

    ?comparison: sum
               | comparison "==" sum  -> eq
               | comparison "!=" sum  -> ne
               | comparison "<" sum   -> lt
               | comparison ">" sum   -> gt
               | comparison "<=" sum  -> le
               | comparison ">=" sum  -> ge

    ?sum: product
        | sum "+" product -> add
        | sum "-" product -> sub

    ?product: unary
            | product "*" unary -> mul
            | product "/" unary -> div
            | product "%" unary -> mod

    ?unary: postfix
          | "-" unary -> neg

    ?postfix: atom
            | postfix "." NAME           -> get_attr
            | postfix "[" expr "]"       -> get_item
            | postfix "(" args? ")"      -> call

    args: expr ("," expr)*

    ?atom: NUMBER                                   -> number
         | STRING                                   -> string
         | "true"                                   -> true
         | "false"                                  -> false
         | "none"                                   -> none
         | "[" (expr ("," expr)*)? "]"              -> list_lit
         | "{" (entry ("," entry)* ","?)? "}"       -> object_lit
         | "new" NAME "(" args? ")"                 -> new_obj
         | NAME                                     -> var
         | "(" expr ")"

    entry: NAME ":" expr

    NAME: /[a-zA-Z_]\w*/
    STRING: /"(?:[^"\\\n]|\\.)*"/
    NUMBER: /\d+(\.\d+)?/

    %import common.WS
    %ignore WS
    %ignore /#[^\n]*/
"""


@lru_cache(maxsize=None)
def make_parser(start: str = "start") -> Lark:
    return Lark(TABULA_GRAMMAR, parser="lalr", start=start)
