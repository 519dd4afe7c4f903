import pytest

from javafacts.adapters.java_adapter import JavaAdapter
from javafacts.facts.document import assemble_all


@pytest.fixture
def adapter():
    return JavaAdapter()


@pytest.fixture
def extract_docs(adapter):
    def _extract(code, file_path="src/Main.java"):
        return assemble_all(adapter.extract_types(code, file_path=file_path))
    return _extract


USER_CONTROLLER = """
package com.acme.web;

import org.springframework.http.ResponseEntity;
import org.springframework.web.bind.annotation.*;
import com.acme.model.User;
import com.acme.repo.UserRepository;

@RestController
@RequestMapping("/api")
public class UserController {
    private final UserRepository userRepository;

    public UserController(UserRepository userRepository) {
        this.userRepository = userRepository;
    }

    @GetMapping("/{id}")
    public ResponseEntity<User> getUser(@PathVariable Long id) {
        User user = userRepository.findById(id);
        return ResponseEntity.ok(user);
    }
}
"""


@pytest.fixture
def user_controller_code():
    return USER_CONTROLLER
