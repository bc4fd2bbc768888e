from pathlib import Path
from unittest.mock import MagicMock

import pytest

from api_doc_gen.config import ApiDocSettings
from api_doc_gen.docs.endpoint import DefineBlock, EndpointDescriptor
from api_doc_gen.docs.param import Param
from api_doc_gen.errors import InvalidDocAttributeError
from api_doc_gen.generator.apidoc import FILE_HEADER, SOURCE_DIR, ApiDocCompiler, ApiDocRenderer
from api_doc_gen.process import ProcessResult


class TestApiDocRenderer:
    def test_block(self):
        call = EndpointDescriptor(
            route="api/v1/users",
            method="post",
            group="user accounts",
            name="Create user",
            params=[Param.make("email"), Param.make("age", "integer").optional()],
            use=["default_headers"],
        )
        assert ApiDocRenderer().render(call).split("\r\n") == [
            "###",
            "@apiVersion 1.0.0",
            "@api {POST} api/v1/users Create user",
            "@apiGroup User Accounts",
            "@apiParam {string} email Email",
            "@apiParam {integer} [age] Age",
            "@apiUse default_headers",
            "###",
        ]

    def test_define_block(self):
        call = EndpointDescriptor(define=DefineBlock(title="default_headers"), headers=[Param.header("Accept")])
        lines = ApiDocRenderer().render(call).split("\r\n")
        assert lines[1] == "@apiDefine default_headers"
        assert "@apiHeader {string} Accept Accept" in lines

    def test_examples(self):
        call = EndpointDescriptor(route="api/x", request_example={"a": 1})
        call.set_success_example({"ok": True}).set_error_example({"message": "no"}, 404)
        block = ApiDocRenderer().render(call)
        assert "@apiParamExample {json} Request Example" in block
        assert "@apiSuccessExample {json} 200 Successful response" in block
        assert "@apiErrorExample {json} 404 Not Found" in block

    def test_param_without_name(self):
        with pytest.raises(InvalidDocAttributeError, match="fieldname"):
            ApiDocRenderer().render(EndpointDescriptor(route="api/x", params=[Param()]))

    def test_files_per_group(self):
        calls = [
            EndpointDescriptor(route="api/users", group="Users", name="List"),
            EndpointDescriptor(route="api/users/{id}", group="Users", name="Show"),
            EndpointDescriptor(route="api/ping"),
        ]
        files = ApiDocRenderer().render_files(calls)
        assert set(files) == {f"{SOURCE_DIR}/users.coffee", f"{SOURCE_DIR}/general.coffee"}
        users = files[f"{SOURCE_DIR}/users.coffee"]
        assert users.startswith(FILE_HEADER)
        assert users.count("@api {GET}") == 2


class TestApiDocCompiler:
    def test_is_installed(self):
        runner = MagicMock()
        runner.run.return_value = ProcessResult(success=True)
        compiler = ApiDocCompiler(ApiDocSettings(command="apidoc", timeout=30), runner)

        assert compiler.is_installed() is True
        runner.run.assert_called_once_with(["apidoc", "--help"], timeout=30)

    def test_compile(self, tmp_path):
        runner = MagicMock()
        runner.run.return_value = ProcessResult(success=False, stderr="boom")
        result = ApiDocCompiler(ApiDocSettings(), runner).compile(tmp_path)

        assert result.success is False
        command = runner.run.call_args.args[0]
        assert command == ["apidoc", "--input", str(tmp_path / SOURCE_DIR), "--output", str(Path(tmp_path) / "api")]
