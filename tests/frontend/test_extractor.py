"""Tests for declaration extraction from tree-sitter PHP trees."""

from zombie_detector.frontend.model import ClassLikeKind, Visibility


def _by_name(decls):
    return {d.name: d for d in decls}


class TestNamespaces:
    """FQN computation across namespace styles."""

    def test_global_namespace(self, parse_php):
        php = parse_php("<?php\nclass Foo {}\nfunction bar() {}\n")
        assert [c.fqn for c in php.classes] == ["\\Foo"]
        assert [f.fqn for f in php.functions] == ["\\bar"]

    def test_unbraced_namespace(self, parse_php):
        php = parse_php("<?php\nnamespace App\\Models;\n\nclass User {}\n")
        assert php.classes[0].fqn == "\\App\\Models\\User"

    def test_multiple_unbraced_namespaces(self, parse_php):
        php = parse_php(
            "<?php\n"
            "namespace First;\n"
            "class A {}\n"
            "namespace Second;\n"
            "class B {}\n"
        )
        assert [c.fqn for c in php.classes] == ["\\First\\A", "\\Second\\B"]

    def test_braced_namespaces(self, parse_php):
        php = parse_php(
            "<?php\n"
            "namespace Lib {\n"
            "    function tool() {}\n"
            "}\n"
            "namespace {\n"
            "    function main() {}\n"
            "}\n"
        )
        assert [f.fqn for f in php.functions] == ["\\Lib\\tool", "\\main"]

    def test_scope_at_returns_namespace_of_offset(self, parse_php):
        php = parse_php("<?php\nnamespace App;\nuse Other\\Thing;\nclass K {}\n")
        scope = php.scope_at(php.classes[0].node.start_byte)
        assert scope.namespace == "App"
        assert scope.resolve_class_name("Thing") == "\\Other\\Thing"


class TestClassLikes:
    """Classes, traits, interfaces and enums."""

    def test_kinds(self, parse_php):
        php = parse_php(
            "<?php\n"
            "class C {}\n"
            "trait T {}\n"
            "interface I {}\n"
            "enum E { case One; }\n"
        )
        kinds = {c.name: c.kind for c in php.classes}
        assert kinds == {
            "C": ClassLikeKind.CLASS,
            "T": ClassLikeKind.TRAIT,
            "I": ClassLikeKind.INTERFACE,
            "E": ClassLikeKind.ENUM,
        }

    def test_extends_implements_and_trait_use_resolved(self, parse_php):
        php = parse_php(
            "<?php\n"
            "namespace App;\n"
            "use Framework\\Model;\n"
            "class User extends Model implements \\JsonSerializable, Contracts\\Auth {\n"
            "    use HasRoles, \\Shared\\Timestamps;\n"
            "}\n"
        )
        user = php.classes[0]
        assert user.parents == ["\\Framework\\Model"]
        assert user.interfaces == ["\\JsonSerializable", "\\App\\Contracts\\Auth"]
        assert user.traits == ["\\App\\HasRoles", "\\Shared\\Timestamps"]

    def test_declaration_line_is_name_line(self, parse_php):
        php = parse_php("<?php\n\n#[Attribute]\nfinal class\n    Spread {}\n")
        assert php.classes[0].line == 5

    def test_nested_class_in_function_is_found(self, parse_php):
        php = parse_php(
            "<?php\n"
            "if (PHP_VERSION_ID > 80000) {\n"
            "    class Compat {}\n"
            "}\n"
        )
        assert [c.fqn for c in php.classes] == ["\\Compat"]

    def test_anonymous_class_is_not_a_declaration(self, parse_php):
        php = parse_php("<?php\n$x = new class { public function go() {} };\n")
        assert php.classes == []
        assert php.methods == []


class TestMethods:
    """Methods declared directly in class-like bodies."""

    def test_method_flags(self, parse_php):
        php = parse_php(
            "<?php\n"
            "abstract class Repo {\n"
            "    public function find() {}\n"
            "    protected static function table() {}\n"
            "    private function hydrate() {}\n"
            "    abstract public function model();\n"
            "    function legacy() {}\n"
            "    final public static function make() {}\n"
            "}\n"
        )
        methods = _by_name(php.methods)
        assert set(methods) == {"find", "table", "hydrate", "model", "legacy", "make"}

        assert not methods["find"].is_static
        assert methods["find"].visibility is Visibility.PUBLIC
        assert methods["table"].is_static
        assert methods["table"].visibility is Visibility.PROTECTED
        assert methods["hydrate"].visibility is Visibility.PRIVATE
        assert methods["model"].is_abstract
        assert methods["legacy"].visibility is Visibility.PUBLIC
        assert methods["make"].is_static

    def test_method_owner_and_fqn(self, parse_php):
        php = parse_php("<?php\nnamespace App;\nclass A { public function run() {} }\n")
        method = php.methods[0]
        assert method.owner is php.classes[0]
        assert method.fqn == "\\App\\A::run"

    def test_trait_methods_belong_to_trait(self, parse_php):
        php = parse_php("<?php\ntrait Greets { public function hi() {} }\n")
        assert php.methods[0].owner.kind is ClassLikeKind.TRAIT

    def test_method_bodies_do_not_add_free_functions(self, parse_php):
        php = parse_php("<?php\nclass A { public function run() { return 1; } }\n")
        assert php.functions == []


class TestFunctions:
    def test_conditional_function(self, parse_php):
        php = parse_php(
            "<?php\n"
            "namespace Compat;\n"
            "if (!function_exists('Compat\\\\str_contains')) {\n"
            "    function str_contains($h, $n) { return strpos($h, $n) !== false; }\n"
            "}\n"
        )
        assert [f.fqn for f in php.functions] == ["\\Compat\\str_contains"]

    def test_function_inside_method_has_no_owner(self, parse_php):
        php = parse_php(
            "<?php\n"
            "class Boot {\n"
            "    public function run() {\n"
            "        function late_helper() {}\n"
            "    }\n"
            "}\n"
        )
        assert [f.fqn for f in php.functions] == ["\\late_helper"]
        assert php.functions[0].owner is None

    def test_inline_html_file(self, parse_php):
        php = parse_php("<html>\n<?php function view_helper() {} ?>\n</html>\n")
        assert [f.fqn for f in php.functions] == ["\\view_helper"]
