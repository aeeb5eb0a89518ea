#!/usr/bin/env python3
"""
cxxfront.py
Single-file C++-subset compiler frontend (lexer → structural checks → parser/AST
→ semantic report → three-address IR → skeletal x86-64 assembly).

Every phase is a plain function over the source text or the AST built once by
the parser; `compile_source` runs them in order and folds their output into a
CompileResult. The recognizers are line- and pattern-driven, not a real C++
grammar: braces inside string literals or comments are counted, declarations
inside function bodies are also reported as top-level variables, and symbol
usage is judged by counting textual occurrences.
"""

import argparse
import json
import logging
import re
import sys
from collections import namedtuple
from pathlib import Path

log = logging.getLogger(__name__)

ENTRY_POINT = 'main'
SOURCE_EXTENSIONS = ('.cpp', '.cxx', '.cc')


class CompileError(Exception):
    pass


Diagnostic = namedtuple('Diagnostic', ['line', 'message'])


def line_of(code, offset):
    return code.count('\n', 0, offset) + 1


def find_line(code, pattern):
    """1-based line of the first match of `pattern`, 0 if nothing matches."""
    regex = re.compile(pattern)
    for lineno, line in enumerate(code.split('\n'), start=1):
        if regex.search(line):
            return lineno
    return 0


STRING_RE = re.compile(r'"(\\.|[^"\\])*"' r"|'(\\.|[^'\\])*'")


def block_comment_state(line, inside):
    # the last marker on the line wins
    opened = line.rfind('/*')
    closed = line.rfind('*/')
    if opened == -1 and closed == -1:
        return inside
    return opened > closed


def comment_markers(line, inside):
    """Return (marked, inside) for one physical line.

    `marked` is True when the line carries a real `/*` or `*/`; markers inside
    string literals or after a `//` that opens before any `/*` do not count.
    """
    text = STRING_RE.sub('""', line)
    if not inside:
        cut = text.find('//')
        opened = text.find('/*')
        if cut != -1 and (opened == -1 or cut < opened):
            text = text[:cut]
    if '/*' not in text and '*/' not in text:
        return False, inside
    return True, block_comment_state(text, inside)


# =====================================================
# LEXER
# =====================================================
Token = namedtuple('Token', ['value', 'kind', 'line'])

KEYWORD = 'keyword'
OPERATOR = 'operator'
LITERAL = 'literal'
PUNCTUATION = 'punctuation'
PREPROCESSOR = 'preprocessor'
IDENTIFIER = 'identifier'

CPP_KEYWORDS = frozenset('''
    alignas alignof and and_eq asm auto bitand bitor bool break case catch
    char char8_t char16_t char32_t class compl concept const consteval
    constexpr const_cast continue co_await co_return co_yield decltype default
    delete do double dynamic_cast else enum explicit export extern false float
    for friend goto if inline int long mutable namespace new noexcept not
    not_eq nullptr operator or or_eq private protected public register
    reinterpret_cast requires return short signed sizeof static static_assert
    static_cast struct switch template this thread_local throw true try
    typedef typeid typename union unsigned using virtual void volatile wchar_t
    while xor xor_eq
'''.split())

OPERATORS = frozenset([
    '+', '-', '*', '/', '%', '=', '==', '!=', '>', '<', '>=', '<=', '&&', '||',
    '!', '++', '--', '+=', '-=', '*=', '/=', '%=', '<<', '>>',
    '&', '|', '^', '~',
])

PUNCTUATORS = frozenset([';', '{', '}', '(', ')', '[', ']', ',', '.', ':', '?'])

# Every operator character is also a split point, so multi-character operators
# in OPERATORS only classify correctly if they reach the lexer some other way.
SPLIT_RE = re.compile(r'''(\s+|;|\{|\}|\(|\)|\[|\]|,|\.|:|&|\||\^|~|!|\+|-|\*|/|%|=|>|<|"|'|\\|\?)''')
NUMBER_RE = re.compile(r'(0[xX][0-9a-fA-F]+|\d+\.?\d*([eE][+-]?\d+)?|\.\d+)[uUlLfF]*$')


def classify(word):
    if word in CPP_KEYWORDS:
        return KEYWORD
    if word in OPERATORS:
        return OPERATOR
    if NUMBER_RE.match(word) or word.startswith('"') or word.startswith("'"):
        return LITERAL
    if word in PUNCTUATORS:
        return PUNCTUATION
    return IDENTIFIER


class Lexer:
    def __init__(self, code):
        self.code = code
        self.tokens = []
        self._tokenize()

    def _tokenize(self):
        in_comment = False
        for lineno, line in enumerate(self.code.split('\n'), start=1):
            stripped = line.strip()
            # lines carrying a block-comment marker are dropped whole,
            # including any code before /* or after */
            marked, in_comment = comment_markers(line, in_comment)
            if marked:
                continue
            if in_comment or stripped.startswith('//'):
                continue
            if stripped.startswith('#'):
                self.tokens.append(Token(stripped, PREPROCESSOR, lineno))
                continue
            for word in SPLIT_RE.split(line):
                if word.strip():
                    self.tokens.append(Token(word, classify(word), lineno))


def tokenize(code):
    return Lexer(code).tokens


# =====================================================
# STRUCTURAL CHECKS
# =====================================================
CLAUSE_RE = re.compile(
    r'\b(namespace|class|struct|enum|typedef|using|template|return'
    r'|if|else|for|while|do|switch|case)\b|\bdefault\s*:')
FUNCTION_SIGNATURE_RE = re.compile(r'(\w+\s+)?\w+\s*\([^)]*\)(\s*const)?\s*(=\s*0)?\s*$')

# words that can sit in front of `name(...)` without being a return type
NON_TYPE_HEADS = frozenset(['return', 'else', 'do', 'new', 'delete', 'case', 'throw', 'goto'])
CONTROL_KEYWORDS = frozenset(['if', 'for', 'while', 'switch', 'catch', 'sizeof', 'return'])

DEFINITION_RE = re.compile(r'\b(\w+)\s+(\w+)\s*\([^)]*\)\s*(?=\{)')
PROTOTYPE_RE = re.compile(r'\b(\w+)\s+(\w+)\s*\([^)]*\)\s*;')


def is_function_head(return_type, name):
    return return_type not in NON_TYPE_HEADS and name not in CONTROL_KEYWORDS


def line_comment_start(line):
    """Index of the first `//` outside a string literal, -1 if there is none."""
    spans = [m.span() for m in STRING_RE.finditer(line)]
    pos = line.find('//')
    while pos != -1 and any(start <= pos < end for start, end in spans):
        pos = line.find('//', pos + 1)
    return pos


def unterminated_before_close(text):
    # only the statement between the last `;`/`{` and the final `}` is
    # checked, so brace initializers like `{1, 2};` pass
    close = text.rfind('}')
    if close == -1:
        return False
    head = text[:close]
    start = max(head.rfind(';'), head.rfind('{'))
    return bool(head[start + 1:].replace('}', '').strip())


def check_semicolons(code):
    errors = []
    in_comment = False
    for lineno, line in enumerate(code.split('\n'), start=1):
        marked, in_comment = comment_markers(line, in_comment)
        if marked or in_comment:
            continue
        cut = line_comment_start(line)
        if cut != -1:
            line = line[:cut]
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        if CLAUSE_RE.search(stripped):
            continue
        if stripped.endswith('{') or stripped.endswith('}') or stripped.startswith('}'):
            if unterminated_before_close(stripped):
                errors.append(Diagnostic(lineno, 'Missing semicolon'))
            continue
        if stripped.endswith(';'):
            continue
        if not FUNCTION_SIGNATURE_RE.search(stripped):
            errors.append(Diagnostic(lineno, 'Missing semicolon'))
    return errors


def check_brackets(code):
    errors = []
    stack = []
    for lineno, line in enumerate(code.split('\n'), start=1):
        for ch in line:
            if ch == '{':
                stack.append(lineno)
            elif ch == '}':
                if stack:
                    stack.pop()
                else:
                    errors.append(Diagnostic(lineno, 'Unmatched closing bracket'))
    if stack:
        errors.append(Diagnostic(stack[0], 'Unmatched opening bracket'))
    return errors


def check_function_declarations(code):
    defined = set()
    for m in DEFINITION_RE.finditer(code):
        if is_function_head(m.group(1), m.group(2)):
            defined.add(m.group(2))

    errors = []
    for m in PROTOTYPE_RE.finditer(code):
        return_type, name = m.group(1), m.group(2)
        if not is_function_head(return_type, name) or name in defined:
            continue
        errors.append(Diagnostic(line_of(code, m.start()),
                                 f"Function '{name}' declared but not defined"))
    return errors


def validate(code):
    return check_semicolons(code) + check_brackets(code) + check_function_declarations(code)


# =====================================================
# AST NODES
# =====================================================
class Node: pass

class Program(Node):
    def __init__(self, body):
        self.body = body

    def functions(self):
        return [n for n in self.body if isinstance(n, FunctionDeclaration)]

class IncludeDirective(Node):
    def __init__(self, value):
        self.value = value

class Param(Node):
    def __init__(self, type, name):
        self.type = type
        self.name = name

class FunctionDeclaration(Node):
    def __init__(self, name, return_type, params, body):
        self.name = name
        self.return_type = return_type
        self.params = params
        self.body = body

class VariableDeclaration(Node):
    def __init__(self, var_type, name, value=None):
        self.var_type = var_type  # 'int' | 'float' | 'double' | 'char' | 'bool' | 'auto'
        self.name = name
        self.value = value  # initializer text, None when absent

class ReturnStatement(Node):
    def __init__(self, value):
        self.value = value

class ExpressionStatement(Node):
    def __init__(self, expression):
        self.expression = expression


# =====================================================
# PARSER (pattern-driven)
# =====================================================
FUNCTION_RE = re.compile(r'\b(\w+)\s+(\w+)\s*\(([^)]*)\)\s*\{')
VARIABLE_RE = re.compile(r'\b(int|float|double|char|bool|auto)\s+(\w+)\s*(=\s*[^;]*)?\s*;')
RETURN_RE = re.compile(r'return\b')


def variable_from_match(m):
    value = m.group(3)[1:].strip() if m.group(3) else None
    return VariableDeclaration(m.group(1), m.group(2), value)


class Parser:
    def __init__(self, code):
        self.code = code

    def parse(self):
        body = []
        body.extend(self.includes())
        body.extend(self.functions())
        # global rescan: declarations inside function bodies land here too
        body.extend(variable_from_match(m) for m in VARIABLE_RE.finditer(self.code))
        return Program(body)

    def includes(self):
        return [IncludeDirective(line.strip()) for line in self.code.split('\n')
                if line.strip().startswith('#include')]

    def functions(self):
        funcs = []
        for m in FUNCTION_RE.finditer(self.code):
            return_type, name, params = m.group(1), m.group(2), m.group(3)
            if not is_function_head(return_type, name):
                continue
            body = self.body_text(m.end())
            funcs.append(FunctionDeclaration(name, return_type,
                                             self.params(params),
                                             self.statements(body)))
        return funcs

    def body_text(self, start):
        # raw character scan, braces in strings and comments count too
        depth = 1
        i = start
        while depth > 0 and i < len(self.code):
            if self.code[i] == '{':
                depth += 1
            elif self.code[i] == '}':
                depth -= 1
            i += 1
        if depth == 0:
            return self.code[start:i - 1]
        return self.code[start:]

    def params(self, text):
        params = []
        for raw in text.split(','):
            parts = raw.split()
            if not parts or parts == ['void']:
                continue
            if len(parts) == 1:
                params.append(Param(parts[0], ''))
            else:
                params.append(Param(' '.join(parts[:-1]), parts[-1]))
        return params

    def statements(self, body):
        stmts = []
        for line in body.split('\n'):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith('//'):
                continue
            m = VARIABLE_RE.search(trimmed)
            if m:
                stmts.append(variable_from_match(m))
            elif RETURN_RE.match(trimmed):
                value = trimmed[len('return'):].split(';')[0].strip()
                stmts.append(ReturnStatement(value))
            elif trimmed.endswith(';'):
                stmts.append(ExpressionStatement(trimmed[:-1].strip()))
        return stmts


def parse(code):
    return Parser(code).parse()


# =====================================================
# SEMANTIC ANALYZER
# =====================================================
class SemanticAnalyzer:
    """Collects symbol tables from the AST and flags unused symbols.

    Usage is a whole-word occurrence count over the full source, so shadowed
    names and names mentioned in comments or strings are miscounted.
    """

    def __init__(self, code):
        self.code = code
        self.variables = []
        self.functions = []
        self.types = []
        self.warnings = []

    def analyze(self, program):
        for node in program.body:
            if isinstance(node, VariableDeclaration):
                self.variables.append({
                    'name': node.name,
                    'type': node.var_type,
                    'line': self.line_of_name(node.name),
                })
                self.note_type(node.var_type)
            elif isinstance(node, FunctionDeclaration):
                self.functions.append({
                    'name': node.name,
                    'returnType': node.return_type,
                    'params': [param_to_dict(p) for p in node.params],
                    'line': self.line_of_name(node.name),
                })
                self.note_type(node.return_type)

        for var in self.variables:
            if self.occurrences(r'\b%s\b' % re.escape(var['name'])) <= 1:
                self.warnings.append(Diagnostic(var['line'], f"Unused variable '{var['name']}'"))
        for func in self.functions:
            if func['name'] == ENTRY_POINT:
                continue
            if self.occurrences(r'\b%s\(' % re.escape(func['name'])) <= 1:
                self.warnings.append(Diagnostic(func['line'], f"Unused function '{func['name']}'"))
        return self.report()

    def line_of_name(self, name):
        return find_line(self.code, r'\b%s\b' % re.escape(name))

    def occurrences(self, pattern):
        return len(re.findall(pattern, self.code))

    def note_type(self, typ):
        if typ not in self.types:
            self.types.append(typ)

    def report(self):
        return {
            'variables': self.variables,
            'functions': self.functions,
            'types': self.types,
            'warnings': self.warnings,
        }


def analyze(program, code):
    return SemanticAnalyzer(code).analyze(program)


# =====================================================
# IR (three-address text) GENERATION
# =====================================================
COMPOUND_OPS = ('<<', '>>', '+', '-', '*', '/', '%', '&', '|', '^')


def split_assignment(expr):
    """Split `target = value` on the first top-level assignment.

    Returns (target, op, value) where op is the compound operator ('' for a
    plain `=`), or None when the expression assigns nothing.
    """
    depth = 0
    i = 0
    while i < len(expr):
        ch = expr[i]
        if ch in '([':
            depth += 1
        elif ch in ')]':
            depth -= 1
        elif ch == '=' and depth == 0:
            if expr[i + 1:i + 2] == '=':
                i += 2
                continue
            head = expr[:i]
            op = ''
            for candidate in COMPOUND_OPS:
                if head.endswith(candidate):
                    op = candidate
                    break
            if not op and head[-1:] in ('!', '<', '>'):
                i += 1
                continue
            return head[:len(head) - len(op)].strip(), op, expr[i + 1:].strip()
        i += 1
    return None


class IRGenerator:
    def __init__(self):
        self.lines = []
        self.temp_count = 0

    def new_temp(self):
        self.temp_count += 1
        return f"T{self.temp_count}"

    def gen(self, program):
        for func in program.functions():
            self.lines.append(f"FUNCTION {func.name}:")
            for param in func.params:
                self.lines.append(f"  PARAM {param.name}")
            for stmt in func.body:
                self.gen_stmt(stmt)
        return self.lines

    def gen_stmt(self, stmt):
        if isinstance(stmt, VariableDeclaration):
            if stmt.value:
                self.assign(stmt.name, stmt.value)
            else:
                self.lines.append(f"  ALLOCATE {stmt.name}")
        elif isinstance(stmt, ReturnStatement):
            self.lines.append(f"  RETURN {stmt.value}")
        elif isinstance(stmt, ExpressionStatement):
            parts = split_assignment(stmt.expression)
            if parts is None:
                self.lines.append(f"  EVAL {stmt.expression}")
                return
            target, op, value = parts
            if op:
                value = f"{target} {op} {value}"
            self.assign(target, value)

    def assign(self, target, value):
        t = self.new_temp()
        self.lines.append(f"  {t} = {value}")
        self.lines.append(f"  {target} = {t}")


def lower(program):
    return IRGenerator().gen(program)


# =====================================================
# TARGET (x86-64 AT&T skeleton) EMISSION
# =====================================================
class TargetEmitter:
    def __init__(self):
        self.asm = []

    def emit(self, program):
        self.asm.extend([
            '.section .data',
            '.LC0:',
            '  .string "Hello, World!"',
            '',
            '.section .text',
            f'.globl {ENTRY_POINT}',
            '',
        ])
        for func in program.functions():
            self.emit_function(func)
        return '\n'.join(self.asm)

    def emit_function(self, func):
        self.asm.append(f"{func.name}:")
        self.asm.append('  pushq %rbp')
        self.asm.append('  movq %rsp, %rbp')
        locals_ = [s for s in func.body if isinstance(s, VariableDeclaration)]
        if locals_:
            self.asm.append(f"  subq ${len(locals_) * 8}, %rsp")
        for stmt in func.body:
            if isinstance(stmt, ReturnStatement):
                if stmt.value == '0':
                    self.asm.append('  movl $0, %eax')
                else:
                    self.asm.append(f"  movl ${stmt.value}, %eax")
        self.asm.append('  leave')
        self.asm.append('  ret')
        self.asm.append('')


def emit(program):
    return TargetEmitter().emit(program)


# =====================================================
# SERIALIZATION
# =====================================================
def param_to_dict(param):
    return {"type": param.type, "name": param.name}


def ast_to_dict(node):
    """Render a Program, declaration or statement node as the report's camelCase JSON shape."""
    if node is None:
        return None
    d = {"type": type(node).__name__}
    if isinstance(node, Program):
        d["body"] = [ast_to_dict(n) for n in node.body]
    elif isinstance(node, IncludeDirective):
        d["value"] = node.value
    elif isinstance(node, FunctionDeclaration):
        d["name"] = node.name
        d["returnType"] = node.return_type
        d["params"] = [param_to_dict(p) for p in node.params]
        d["body"] = [ast_to_dict(s) for s in node.body]
    elif isinstance(node, VariableDeclaration):
        d["varType"] = node.var_type
        d["name"] = node.name
        if node.value is not None:
            d["value"] = node.value
    elif isinstance(node, ReturnStatement):
        d["value"] = node.value
    elif isinstance(node, ExpressionStatement):
        d["expression"] = node.expression
    return d


def diagnostics_to_dicts(diagnostics):
    return [d._asdict() for d in diagnostics]


class CompileResult(namedtuple('CompileResult', [
        'success', 'tokens', 'ast', 'errors',
        'intermediate_code', 'semantic_analysis', 'target_code'])):
    __slots__ = ()

    @classmethod
    def failure(cls, message):
        return cls(
            success=False,
            tokens=[],
            ast={},
            errors=[Diagnostic(0, f"Compilation error: {message}")],
            intermediate_code='',
            semantic_analysis={},
            target_code='',
        )

    def to_dict(self):
        semantic = dict(self.semantic_analysis)
        if 'warnings' in semantic:
            semantic['warnings'] = diagnostics_to_dicts(semantic['warnings'])
        return {
            "success": self.success,
            "tokens": [t._asdict() for t in self.tokens],
            "ast": ast_to_dict(self.ast) if isinstance(self.ast, Node) else {},
            "errors": diagnostics_to_dicts(self.errors),
            "intermediateCode": self.intermediate_code,
            "semanticAnalysis": semantic,
            "targetCode": self.target_code,
        }


# =====================================================
# COMPILER DRIVER
# =====================================================
ENTRY_RE = r'\b(int|void)\s+%s\s*\(' % ENTRY_POINT


def compile_source(code):
    try:
        tokens = tokenize(code)
        log.debug("lexed %d tokens", len(tokens))

        errors = []
        entry_line = find_line(code, ENTRY_RE)
        if not entry_line:
            errors.append(Diagnostic(0, f'Missing {ENTRY_POINT} function'))
        errors.extend(validate(code))

        program = parse(code)
        log.debug("parsed %d top-level nodes", len(program.body))
        semantic = analyze(program, code)
        ir = lower(program)
        log.debug("generated %d IR lines", len(ir))
        asm = emit(program)
    except Exception as e:
        log.exception("compilation aborted")
        return CompileResult.failure(str(e))

    success = bool(entry_line) and not errors
    log.info("compiled %d lines: %s, %d errors, %d warnings",
             code.count('\n') + 1, 'ok' if success else 'failed',
             len(errors), len(semantic['warnings']))
    return CompileResult(
        success=success,
        tokens=tokens,
        ast=program,
        errors=errors,
        intermediate_code='\n'.join(ir),
        semantic_analysis=semantic,
        target_code=asm,
    )


def check_extension(filename, allowed=SOURCE_EXTENSIONS):
    allowed = tuple(allowed)
    if not filename or not filename.lower().endswith(allowed):
        raise CompileError(f"Please upload a C++ file ({', '.join(allowed)})")


# =====================================================
# COMMAND LINE
# =====================================================
STAGES = ('tokens', 'ast', 'errors', 'semantic', 'ir', 'asm', 'all')


def format_report(result, stage='all'):
    out = []
    if stage in ('all', 'errors'):
        out.append('Compilation ' + ('succeeded' if result.success else 'failed'))
        for err in result.errors:
            out.append(f"  line {err.line}: {err.message}")
    if stage in ('all', 'semantic'):
        for warn in result.semantic_analysis.get('warnings', []):
            out.append(f"  warning (line {warn.line}): {warn.message}")
    if stage == 'tokens':
        for tok in result.tokens:
            out.append(f"{tok.line:4}  {tok.kind:<12} {tok.value}")
    if stage == 'ast':
        out.append(json.dumps(result.to_dict()['ast'], indent=2))
    if stage in ('all', 'ir'):
        out.append('')
        out.append(result.intermediate_code)
    if stage in ('all', 'asm'):
        out.append('')
        out.append(result.target_code)
    return '\n'.join(out)


def main(argv=None):
    ap = argparse.ArgumentParser(prog='cxxfront', description="C++ subset compiler frontend")
    ap.add_argument("source", type=Path, help="Source .cpp/.cxx/.cc file")
    ap.add_argument("--stage", choices=STAGES, default='all', help="Phase output to print")
    ap.add_argument("--json", action="store_true", help="Print the full report as JSON")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log each phase")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s:%(name)s:%(lineno)d: %(message)s')

    try:
        check_extension(args.source.name)
        code = args.source.read_text(encoding='utf-8')
    except (CompileError, OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    result = compile_source(code)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_report(result, args.stage))
    return 0 if result.success else 1


if __name__ == '__main__':
    sys.exit(main())
