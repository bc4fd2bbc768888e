from api_doc_gen.docs.naming import (
    humanize,
    operation_id,
    plural,
    security_scheme_name,
    singular,
    snake,
    studly,
    synthesize_default_name,
    ucwords,
    variable_name,
)


class TestDefaultName:
    def test_by_method(self):
        assert synthesize_default_name("POST", "Users") == "Create a User"
        assert synthesize_default_name("DELETE", "Users") == "Delete a User"
        assert synthesize_default_name("PUT", "Users") == "Update a User"
        assert synthesize_default_name("PATCH", "Users") == "Update a User"
        assert synthesize_default_name("GET", "Users") == "Get a User"

    def test_get_with_action(self):
        assert synthesize_default_name("GET", "Users", "app.UserController@show") == "Get a User"
        assert synthesize_default_name("GET", "Users", "app.UserController@search") == "List Users"
        assert synthesize_default_name("GET", "Users", "app.UserController@index") == "Search User"

    def test_index_wins_over_search(self):
        assert synthesize_default_name("GET", "Users", "app.UserController@searchIndex") == "Search User"

    def test_missing_group(self):
        assert synthesize_default_name("GET", None) == "Get a Item"


class TestInflection:
    def test_plural(self):
        assert plural("category") == "categories"
        assert plural("box") == "boxes"
        assert plural("person") == "people"
        assert plural("news") == "news"

    def test_singular(self):
        assert singular("categories") == "category"
        assert singular("boxes") == "box"
        assert singular("People") == "Person"
        assert singular("status") == "status"


class TestCase:
    def test_humanize(self):
        assert humanize("created_at") == "Created at"

    def test_ucwords(self):
        assert ucwords("user accounts") == "User Accounts"

    def test_snake(self):
        assert snake("Default Headers") == "default_headers"
        assert snake("UserProfile") == "user_profile"
        assert snake("users") == "users"

    def test_studly(self):
        assert studly("user_profile") == "UserProfile"
        assert studly("list-all users") == "ListAllUsers"


class TestIdentifiers:
    def test_operation_id(self):
        assert operation_id("User Accounts", "Get a user") == "userAccountsGetauser"
        assert operation_id(None, None) == "apiOperation"

    def test_variable_name(self):
        assert variable_name("X-Api-Key") == "x_api_key"

    def test_security_scheme_name(self):
        assert security_scheme_name("x-api-key") == "apiKey"
        assert security_scheme_name("Authorization") == "authorization"
