from api_doc_gen.generator.code_examples import axios, curl, fetch


class TestCurl:
    def test_get_ignores_body(self):
        snippet = curl("get", "http://x/users", {"Accept": "application/json"}, {"a": 1}, {"page": 2})
        assert snippet.startswith('curl -X GET "http://x/users?page=2"')
        assert '-H "Accept: application/json"' in snippet
        assert "-d" not in snippet

    def test_post_escapes_quotes(self):
        snippet = curl("POST", "http://x/notes", body={"note": "it's"})
        assert "-d '{" in snippet
        assert "it'\\''s" in snippet


class TestFetch:
    def test_async(self):
        snippet = fetch("POST", "http://x/users", {"X-Api-Key": "k"}, {"name": "John"})
        assert snippet.startswith("const response = await fetch('http://x/users', {")
        assert "'X-Api-Key': 'k'" in snippet
        assert "body: JSON.stringify(" in snippet

    def test_promise(self):
        snippet = fetch("DELETE", "http://x/users/1", body={"a": 1}, use_async=False)
        assert ".then(response => response.json())" in snippet
        assert "body:" not in snippet


class TestAxios:
    def test_post(self):
        snippet = axios("post", "http://x/users", {"X-Api-Key": "k"}, {"a": 1})
        assert snippet.startswith("const response = await axios.post('http://x/users', {")
        assert '"a": 1' in snippet
        assert "'X-Api-Key': 'k'" in snippet
